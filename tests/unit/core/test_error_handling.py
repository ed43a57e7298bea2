"""
Tests for error handling middleware.

Tests:
- Sensitive data sanitization
- The error envelope for domain, validation and unexpected errors
- Integrity error classification
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError

from core.middleware.authentication import TokenExpiredError
from core.middleware.authorization import AccessDenied
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    sanitize_error_message,
    setup_error_handlers,
)
from core.storage.base import ObjectNotFound
from database.errors import (
    CheckViolation,
    ConstraintViolation,
    ForeignKeyViolation,
    NotNullViolation,
    RecordNotFound,
    UniqueViolation,
    classify_integrity_error,
)


class FakeDriverError(Exception):
    """Stands in for an asyncpg error carrying SQLSTATE details."""

    def __init__(self, message, sqlstate=None, constraint_name=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


def integrity_error(message, **kwargs) -> IntegrityError:
    return IntegrityError("INSERT INTO t VALUES (...)", {}, FakeDriverError(message, **kwargs))


class Payload(BaseModel):
    name: str
    count: int


@pytest.fixture
def client():
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware, debug=False)

    @app.get("/missing")
    async def missing():
        raise RecordNotFound("Job not found")

    @app.get("/denied")
    async def denied():
        raise AccessDenied()

    @app.get("/expired")
    async def expired():
        raise TokenExpiredError()

    @app.get("/no-file")
    async def no_file():
        raise ObjectNotFound()

    @app.get("/duplicate")
    async def duplicate():
        raise integrity_error("duplicate key", sqlstate="23505", constraint_name="uq_thing")

    @app.get("/database-down")
    async def database_down():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    @app.get("/boom")
    async def boom():
        raise RuntimeError("password=hunter2 leaked")

    @app.post("/items")
    async def create_item(payload: Payload):
        return payload

    return TestClient(app)


class TestSensitiveDataSanitization:

    @pytest.mark.parametrize("message,secret", [
        ('password="hunter2"', "hunter2"),
        ("token=abc.def.ghi", "abc.def.ghi"),
        ("secret: s3cr3t", "s3cr3t"),
        ("Bearer eyJhbGciOi.payload.sig", "eyJhbGciOi.payload.sig"),
    ])
    def test_secrets_are_redacted(self, message, secret):
        sanitized = sanitize_error_message(message)
        assert secret not in sanitized
        assert "[REDACTED]" in sanitized

    def test_plain_messages_are_untouched(self):
        assert sanitize_error_message("Job not found") == "Job not found"


class TestErrorEnvelope:

    def test_not_found(self, client):
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": {
                "code": "NOT_FOUND",
                "message": "Job not found",
                "path": "/missing",
                "method": "GET",
            }
        }

    def test_access_denied(self, client):
        response = client.get("/denied")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"

    def test_authentication_errors_carry_challenge(self, client):
        response = client.get("/expired")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_storage_errors(self, client):
        response = client.get("/no-file")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "File not found"

    def test_untranslated_integrity_error(self, client):
        response = client.get("/duplicate")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE"

    def test_validation_error_details(self, client):
        response = client.post("/items", json={"name": "x", "count": "many"})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert [d["field"] for d in error["details"]] == ["body.count"]

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_EXCEPTION"

    def test_database_outage(self, client):
        response = client.get("/database-down")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "DATABASE_ERROR"

    def test_unexpected_error_hides_details(self, client):
        response = client.get("/boom")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_SERVER_ERROR"
        assert error["message"] == "An unexpected error occurred"
        assert "details" not in error
        assert "hunter2" not in response.text


class TestIntegrityClassification:

    @pytest.mark.parametrize("kwargs,expected", [
        ({"sqlstate": "23505"}, UniqueViolation),
        ({"sqlstate": "23503"}, ForeignKeyViolation),
        ({"sqlstate": "23502"}, NotNullViolation),
        ({"sqlstate": "23514"}, CheckViolation),
    ])
    def test_postgres_sqlstates(self, kwargs, expected):
        violation = classify_integrity_error(integrity_error("violation", **kwargs))
        assert type(violation) is expected

    @pytest.mark.parametrize("message,expected", [
        ("UNIQUE constraint failed: identities.email", UniqueViolation),
        ("FOREIGN KEY constraint failed", ForeignKeyViolation),
        ("NOT NULL constraint failed: jobs.title", NotNullViolation),
        ("CHECK constraint failed: ck_jobs_salary_range", CheckViolation),
    ])
    def test_sqlite_messages(self, message, expected):
        violation = classify_integrity_error(integrity_error(message))
        assert type(violation) is expected

    def test_constraint_name_is_kept(self):
        violation = classify_integrity_error(
            integrity_error("dup", sqlstate="23505", constraint_name="uq_applications_job_applicant")
        )
        assert violation.constraint == "uq_applications_job_applicant"
        assert violation.status_code == 409

    def test_unknown_violation(self):
        violation = classify_integrity_error(integrity_error("something odd"))
        assert type(violation) is ConstraintViolation
        assert violation.status_code == 422
