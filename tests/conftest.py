"""Shared fixtures and utilities for tests."""

import os
import tempfile
from pathlib import Path

# Settings and the engine are built at import time, so the environment has
# to be in place before anything from the application is imported.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="jobboard-tests-"))

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-min-32-chars-long-for-security"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_PATH"] = str(_TEST_DIR / "storage")
os.environ["JSON_LOGS"] = "false"
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_BUCKET", "test-bucket")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from api.dependencies import get_resume_storage  # noqa: E402
from api.main import app  # noqa: E402
from api.services import auth as auth_service  # noqa: E402
from core.middleware.authorization import Caller  # noqa: E402
from core.storage.local import LocalStorage  # noqa: E402
from database.engine import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from database.models.jobs import Job, JobStatus  # noqa: E402
from database.models.profiles import UserRole  # noqa: E402


@pytest_asyncio.fixture
async def database():
    """Fresh schema for each test."""
    await drop_db()
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def session(database):
    """An AsyncSession against the fresh schema."""
    async with AsyncSessionLocal() as db:
        yield db


@pytest.fixture
def storage(tmp_path):
    """Local resume storage rooted in a per-test directory."""
    return LocalStorage(str(tmp_path / "resumes"))


@pytest_asyncio.fixture
async def client(database, storage):
    """HTTP client talking to the app in-process."""
    app.dependency_overrides[get_resume_storage] = lambda: storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ==================== Service-level helpers ==================== #

async def make_user(
    db,
    email: str,
    role: UserRole = UserRole.JOB_SEEKER,
    full_name: str | None = None,
) -> Caller:
    """Sign up an identity and return it as a caller with ``role``."""
    identity, profile = await auth_service.signup(
        db, email=email, password="secret123", full_name=full_name
    )
    if role != UserRole.JOB_SEEKER:
        profile.role = role
        await db.commit()
    return Caller(identity_id=identity.id, role=role, email=identity.email)


async def make_job(db, recruiter: Caller, **overrides) -> Job:
    """Insert a job owned by ``recruiter`` directly."""
    values = {
        "title": "Backend Engineer",
        "description": "Build APIs",
        "company_name": "Acme",
        "location": "Remote",
        "job_type": "full-time",
        "salary_min": 120000,
        "salary_max": 150000,
        "required_skills": ["python", "sql"],
        "status": JobStatus.OPEN,
    }
    values.update(overrides)
    job = Job(recruiter_id=recruiter.identity_id, **values)
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


@pytest_asyncio.fixture
async def seeker(session) -> Caller:
    return await make_user(session, "seeker@example.com", full_name="Sam Seeker")


@pytest_asyncio.fixture
async def recruiter(session) -> Caller:
    return await make_user(
        session, "recruiter@example.com", UserRole.RECRUITER, full_name="Rita Recruiter"
    )


@pytest_asyncio.fixture
async def open_job(session, recruiter) -> Job:
    return await make_job(session, recruiter)


# ==================== HTTP helpers ==================== #

async def signup_via_api(
    client: AsyncClient,
    email: str,
    full_name: str | None = None,
    role: str | None = None,
) -> dict:
    """Sign up over HTTP; returns auth headers and the signup response."""
    payload = {"email": email, "password": "secret123"}
    if full_name is not None:
        payload["full_name"] = full_name
    response = await client.post("/api/v1/auth/signup", json=payload)
    assert response.status_code == 201, response.text
    body = response.json()
    headers = {"Authorization": f"Bearer {body['access_token']}"}

    if role is not None:
        update = await client.patch("/api/v1/profiles/me", json={"role": role}, headers=headers)
        assert update.status_code == 200, update.text

    return {"headers": headers, "body": body}


JOB_PAYLOAD = {
    "title": "Data Engineer",
    "description": "Own the pipelines",
    "company_name": "Globex",
    "location": "Berlin",
    "job_type": "full-time",
    "salary_min": 80000,
    "salary_max": 100000,
    "required_skills": ["python", "spark"],
}
