"""
Application service functions for API endpoints.

Applying is a single INSERT. Two concurrent submissions for the same
(job, applicant) pair are settled by the unique constraint; the loser gets
``AlreadyAppliedError``.
"""

from typing import List, Optional
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
from core.security import AuditAction, ResourceType, log_audit_event
from database.errors import UniqueViolation, classify_integrity_error
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job
from database.models.profiles import Profile

logger = logging.getLogger(__name__)

_WITH_JOB = (selectinload(Application.job),)
_WITH_JOB_AND_APPLICANT = (
    selectinload(Application.job),
    selectinload(Application.applicant),
)


class AlreadyAppliedError(UniqueViolation):
    code = "ALREADY_APPLIED"
    default_message = "You've already applied to this job"


async def apply_to_job(
    db: AsyncSession,
    caller: Caller,
    job_id: uuid.UUID,
    cover_letter: Optional[str] = None,
    resume_url: Optional[str] = None,
) -> Application:
    """
    Submit the caller's application to a visible job.

    Raises:
        RecordNotFound: the job does not exist or is not open to the caller
        AccessDenied: the caller is not a job seeker
        AlreadyAppliedError: the caller already applied to this job
    """
    await load_authorized(db, caller, Job, job_id)

    if resume_url is None:
        profile = await db.get(Profile, caller.identity_id)
        resume_url = profile.resume_url if profile else None

    application = Application(
        job_id=job_id,
        applicant_id=caller.identity_id,
        status=ApplicationStatus.APPLIED,
        cover_letter=cover_letter,
        resume_url=resume_url,
    )
    await authorize(db, caller, Operation.CREATE, application)

    db.add(application)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        violation = classify_integrity_error(exc)
        if isinstance(violation, UniqueViolation):
            logger.info(f"Duplicate application by {caller.identity_id} to job {job_id}")
            raise AlreadyAppliedError() from exc
        raise violation from exc

    await db.refresh(application)
    await log_audit_event(
        action=AuditAction.CREATE,
        resource_type=ResourceType.APPLICATION,
        resource_id=application.id,
        identity_id=caller.identity_id,
        details={"job_id": str(job_id)},
    )
    return application


async def list_my_applications(db: AsyncSession, caller: Caller) -> List[Application]:
    """Applications the caller submitted, newest first, with job summaries."""
    result = await db.execute(
        select(Application)
        .where(
            Application.applicant_id == caller.identity_id,
            visible(caller, Application),
        )
        .options(*_WITH_JOB)
        .order_by(Application.applied_at.desc())
    )
    return list(result.scalars().all())


async def list_received_applications(
    db: AsyncSession,
    caller: Caller,
    status: Optional[ApplicationStatus] = None,
    job_id: Optional[uuid.UUID] = None,
) -> List[Application]:
    """Applications to the caller's jobs, newest first, with applicant contact."""
    query = (
        select(Application)
        .join(Job, Application.job_id == Job.id)
        .where(Job.recruiter_id == caller.identity_id, visible(caller, Application))
        .options(*_WITH_JOB_AND_APPLICANT)
        .order_by(Application.applied_at.desc())
    )
    if status is not None:
        query = query.where(Application.status == status)
    if job_id is not None:
        query = query.where(Application.job_id == job_id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_application(
    db: AsyncSession, caller: Caller, application_id: uuid.UUID
) -> Application:
    """One application, visible to its applicant and to the job's recruiter."""
    return await load_authorized(
        db, caller, Application, application_id, options=_WITH_JOB_AND_APPLICANT
    )


async def update_application_status(
    db: AsyncSession,
    caller: Caller,
    application_id: uuid.UUID,
    status: ApplicationStatus,
) -> Application:
    """
    Move an application to ``status``.

    Only the recruiter owning the job may do this; the applicant can read
    the application but gets ``AccessDenied`` here.
    """
    application = await load_authorized(
        db,
        caller,
        Application,
        application_id,
        Operation.UPDATE,
        options=_WITH_JOB_AND_APPLICANT,
    )
    previous = application.status
    application.status = status

    await db.commit()
    # keeps the eagerly loaded job and applicant in place
    await db.refresh(application, ["status", "updated_at"])

    await log_audit_event(
        action=AuditAction.STATUS_CHANGE,
        resource_type=ResourceType.APPLICATION,
        resource_id=application.id,
        identity_id=caller.identity_id,
        details={"from": previous.value, "to": status.value},
    )
    return application
