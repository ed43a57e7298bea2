"""
Storage error taxonomy.

Constraint violations raised by the database are translated into these
exceptions so callers can tell a duplicate apart from a dangling reference
or a missing required column. ``core.middleware.error_handling`` renders
them using their ``status_code`` and ``code``.
"""

from sqlalchemy.exc import IntegrityError

# SQLSTATE classes from the Postgres manual (class 23: integrity violation)
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"


class StoreError(Exception):
    """Base class for errors surfaced by the data layer."""

    status_code = 422
    code = "CONSTRAINT_VIOLATION"
    default_message = "The data violates a storage constraint"

    def __init__(self, message: str | None = None, constraint: str | None = None):
        self.message = message or self.default_message
        self.constraint = constraint
        super().__init__(self.message)


class ConstraintViolation(StoreError):
    pass


class UniqueViolation(ConstraintViolation):
    status_code = 409
    code = "DUPLICATE"
    default_message = "A matching record already exists"


class ForeignKeyViolation(ConstraintViolation):
    status_code = 409
    code = "INVALID_REFERENCE"
    default_message = "A referenced record does not exist"


class NotNullViolation(ConstraintViolation):
    default_message = "A required field is missing"


class CheckViolation(ConstraintViolation):
    pass


class RecordNotFound(StoreError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Record not found"


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    # asyncpg and psycopg expose the code under different names
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _constraint_name(exc: IntegrityError) -> str | None:
    orig = exc.orig
    name = getattr(orig, "constraint_name", None)
    if name:
        return name
    diag = getattr(orig, "diag", None)
    return getattr(diag, "constraint_name", None)


def classify_integrity_error(exc: IntegrityError) -> ConstraintViolation:
    """
    Map a driver ``IntegrityError`` onto the storage taxonomy.

    Postgres drivers report a SQLSTATE. SQLite only gives us the message
    text, which is stable enough to match on.
    """
    state = _sqlstate(exc)
    constraint = _constraint_name(exc)
    text = str(exc.orig)

    if state == UNIQUE_VIOLATION or "UNIQUE constraint failed" in text:
        return UniqueViolation(constraint=constraint)
    if state == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in text:
        return ForeignKeyViolation(constraint=constraint)
    if state == NOT_NULL_VIOLATION or "NOT NULL constraint failed" in text:
        return NotNullViolation(constraint=constraint)
    if state == CHECK_VIOLATION or "CHECK constraint failed" in text:
        return CheckViolation(constraint=constraint)
    return ConstraintViolation(constraint=constraint)
