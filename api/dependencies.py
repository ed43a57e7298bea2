"""FastAPI dependencies for dependency injection."""

from fastapi import Query

from api.schemas.common import PaginationParams
from core.middleware.authentication import get_caller, require_caller, require_role
from core.storage.base import ResumeStorage
from core.storage.factory import get_storage
from database.engine import get_db
from database.models.profiles import UserRole

__all__ = [
    "get_db",
    "get_caller",
    "require_caller",
    "require_recruiter",
    "get_pagination",
    "get_resume_storage",
]


# Recruiter-only endpoints (applicant review, analytics, own job list)
require_recruiter = require_role(UserRole.RECRUITER)


def get_pagination(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
) -> PaginationParams:
    """Pagination query parameters."""
    return PaginationParams(page=page, page_size=page_size)


def get_resume_storage() -> ResumeStorage:
    """Resume storage backend; override in tests via ``dependency_overrides``."""
    return get_storage()
