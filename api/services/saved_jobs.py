"""Saved job (bookmark) service functions."""

from typing import List
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.middleware.authorization import (
    Caller,
    Operation,
    authorize,
    load_authorized,
    visible,
)
from database.errors import RecordNotFound, UniqueViolation, classify_integrity_error
from database.models.jobs import Job
from database.models.saved_jobs import SavedJob

logger = logging.getLogger(__name__)


class AlreadySavedError(UniqueViolation):
    code = "ALREADY_SAVED"
    default_message = "Job is already saved"


async def list_saved_jobs(db: AsyncSession, caller: Caller) -> List[SavedJob]:
    """
    The caller's bookmarks, most recent first.

    Bookmarks of jobs that have since been closed or paused are left out
    because the job itself is no longer visible.
    """
    result = await db.execute(
        select(SavedJob)
        .join(Job, SavedJob.job_id == Job.id)
        .where(visible(caller, SavedJob), visible(caller, Job))
        .options(selectinload(SavedJob.job))
        .order_by(SavedJob.saved_at.desc())
    )
    return list(result.scalars().all())


async def save_job(db: AsyncSession, caller: Caller, job_id: uuid.UUID) -> SavedJob:
    """
    Bookmark a visible job.

    Raises:
        RecordNotFound: the job does not exist or is not visible
        AlreadySavedError: the job is already bookmarked
    """
    await load_authorized(db, caller, Job, job_id)

    saved = SavedJob(job_id=job_id, user_id=caller.identity_id)
    await authorize(db, caller, Operation.CREATE, saved)

    db.add(saved)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        violation = classify_integrity_error(exc)
        if isinstance(violation, UniqueViolation):
            raise AlreadySavedError() from exc
        raise violation from exc

    await db.refresh(saved)
    return saved


async def unsave_job(db: AsyncSession, caller: Caller, job_id: uuid.UUID) -> None:
    """
    Remove the caller's bookmark for ``job_id``.

    Raises:
        RecordNotFound: there is no such bookmark
    """
    result = await db.execute(
        select(SavedJob).where(
            SavedJob.job_id == job_id,
            SavedJob.user_id == caller.identity_id,
            visible(caller, SavedJob),
        )
    )
    saved = result.scalar_one_or_none()
    if saved is None:
        raise RecordNotFound("Saved job not found")

    await authorize(db, caller, Operation.DELETE, saved)
    await db.delete(saved)
    await db.commit()
    logger.debug(f"Job {job_id} unsaved by {caller.identity_id}")
