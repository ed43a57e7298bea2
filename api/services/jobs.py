"""Job service functions."""

from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import Text, column, exists, select, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import PaginationParams
from core.config import settings
from core.middleware.authorization import (
    Caller,
    Operation,
    authorize,
    load_authorized,
    visible,
)
from core.security import AuditAction, ResourceType, log_audit_event
from core.utils.formatting import LIKE_ESCAPE, escape_like
from database.models.jobs import Job, JobStatus
from database.models.applications import Application
from database.models.saved_jobs import SavedJob

logger = logging.getLogger(__name__)


def _contains(text: str) -> str:
    return f"%{escape_like(text.strip())}%"


def _skill_matches(dialect: str, pattern: str):
    """Any single element of ``required_skills`` matches ``pattern``."""
    if dialect == "postgresql":
        elements = (
            func.unnest(Job.required_skills)
            .table_valued(column("value", Text))
            .render_derived()
        )
    else:
        # the array column is stored as a JSON list off Postgres
        elements = func.json_each(Job.required_skills).table_valued(
            column("value", Text)
        )
    return exists(
        select(1)
        .select_from(elements)
        .where(elements.c.value.ilike(pattern, escape=LIKE_ESCAPE))
    )


def _search_clause(dialect: str, search: str):
    pattern = _contains(search)
    return or_(
        Job.title.ilike(pattern, escape=LIKE_ESCAPE),
        Job.company_name.ilike(pattern, escape=LIKE_ESCAPE),
        _skill_matches(dialect, pattern),
    )


async def saved_job_ids(
    db: AsyncSession, caller: Optional[Caller], job_ids: List[uuid.UUID]
) -> set[uuid.UUID]:
    """Which of ``job_ids`` the caller has bookmarked."""
    if caller is None or not job_ids:
        return set()
    result = await db.execute(
        select(SavedJob.job_id).where(
            SavedJob.job_id.in_(job_ids), visible(caller, SavedJob)
        )
    )
    return set(result.scalars().all())


async def list_jobs(
    db: AsyncSession,
    caller: Optional[Caller],
    pagination: PaginationParams,
    search: Optional[str] = None,
    location: Optional[str] = None,
    status: Optional[JobStatus] = None,
) -> tuple[List[Job], int]:
    """
    Jobs visible to the caller, newest first.

    Non-open jobs only ever appear for their owning recruiter.
    """
    query = select(Job).where(visible(caller, Job))

    if search and search.strip():
        dialect = db.get_bind().dialect.name
        query = query.where(_search_clause(dialect, search))
    if location and location.strip():
        query = query.where(
            Job.location.ilike(_contains(location), escape=LIKE_ESCAPE)
        )
    if status is not None:
        query = query.where(Job.status == status)

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar() or 0

    query = (
        query.order_by(Job.created_at.desc(), Job.id)
        .limit(pagination.page_size)
        .offset(pagination.offset)
    )
    jobs = list((await db.execute(query)).scalars().all())
    return jobs, total


async def list_recruiter_jobs(db: AsyncSession, caller: Caller) -> List[Job]:
    """The caller's own postings in every status."""
    result = await db.execute(
        select(Job)
        .where(Job.recruiter_id == caller.identity_id, visible(caller, Job))
        .order_by(Job.created_at.desc())
    )
    return list(result.scalars().all())


async def get_job(
    db: AsyncSession, caller: Optional[Caller], job_id: uuid.UUID
) -> tuple[Job, Dict[str, Any]]:
    """
    Load a visible job and the caller's relationship to it.

    A view by anyone but the owner bumps ``views_count``.
    """
    job = await load_authorized(db, caller, Job, job_id)
    is_owner = caller is not None and job.recruiter_id == caller.identity_id

    if not is_owner and settings.maintain_job_counters:
        await db.execute(
            update(Job)
            .where(Job.id == job.id)
            .values(views_count=Job.views_count + 1, updated_at=Job.updated_at)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(job)

    context = {"is_owner": is_owner, "has_applied": False, "is_saved": False}
    if caller is not None and not is_owner:
        applied = await db.execute(
            select(func.count())
            .select_from(Application)
            .where(
                Application.job_id == job.id,
                Application.applicant_id == caller.identity_id,
            )
        )
        context["has_applied"] = (applied.scalar() or 0) > 0
        context["is_saved"] = job.id in await saved_job_ids(db, caller, [job.id])

    return job, context


async def create_job(db: AsyncSession, caller: Caller, data: Dict[str, Any]) -> Job:
    """
    Post a job owned by the caller.

    Raises:
        AccessDenied: the caller's profile is not a recruiter
    """
    job = Job(recruiter_id=caller.identity_id, **data)
    await authorize(db, caller, Operation.CREATE, job)

    db.add(job)
    await db.commit()
    await db.refresh(job)

    await log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.JOB,
        resource_id=job.id,
        identity_id=caller.identity_id,
    )
    logger.info(f"Job {job.id} posted by {caller.identity_id}")
    return job


async def update_job(
    db: AsyncSession, caller: Caller, job_id: uuid.UUID, changes: Dict[str, Any]
) -> Job:
    """Owner-only edit of fields and status, whatever the current status."""
    job = await load_authorized(db, caller, Job, job_id, Operation.UPDATE)

    for field, value in changes.items():
        setattr(job, field, value)

    await db.commit()
    await db.refresh(job)

    await log_audit_event(
        action=AuditAction.STATUS_CHANGE if set(changes) == {"status"} else AuditAction.UPDATE,
        resource_type=ResourceType.JOB,
        resource_id=job.id,
        identity_id=caller.identity_id,
        details={"fields": sorted(changes)},
    )
    return job


async def delete_job(db: AsyncSession, caller: Caller, job_id: uuid.UUID) -> None:
    """Owner-only delete; applications and saves go with it."""
    job = await load_authorized(db, caller, Job, job_id, Operation.DELETE)

    await db.delete(job)
    await db.commit()

    await log_audit_event(
        action=AuditAction.DELETE,
        resource_type=ResourceType.JOB,
        resource_id=job_id,
        identity_id=caller.identity_id,
    )
    logger.info(f"Job {job_id} deleted by {caller.identity_id}")
