"""Dashboard counts and recruiter analytics."""

from typing import Any, Dict
import logging

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.authorization import Caller, visible
from core.utils.formatting import format_percentage
from database.errors import RecordNotFound
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job, JobStatus
from database.models.profiles import Profile
from database.models.saved_jobs import SavedJob

logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar() or 0


async def dashboard(db: AsyncSession, caller: Caller) -> Dict[str, Any]:
    """
    Headline numbers for the caller's dashboard.

    Recruiters see their open jobs and total applicants across their jobs;
    everyone else sees their applications and their bookmarks of jobs
    that are still visible.
    """
    profile = await db.get(Profile, caller.identity_id)
    if profile is None:
        raise RecordNotFound("Profile not found")

    if caller.is_recruiter:
        stats = {
            "active_jobs": await _count(
                db,
                select(func.count())
                .select_from(Job)
                .where(
                    Job.recruiter_id == caller.identity_id,
                    Job.status == JobStatus.OPEN,
                ),
            ),
            "total_applicants": await _count(
                db,
                select(func.count())
                .select_from(Application)
                .join(Job, Application.job_id == Job.id)
                .where(Job.recruiter_id == caller.identity_id),
            ),
        }
    else:
        stats = {
            "applications": await _count(
                db,
                select(func.count())
                .select_from(Application)
                .where(Application.applicant_id == caller.identity_id),
            ),
            "saved_jobs": await _count(
                db,
                select(func.count())
                .select_from(SavedJob)
                .join(Job, SavedJob.job_id == Job.id)
                .where(visible(caller, SavedJob), visible(caller, Job)),
            ),
        }

    return {"role": profile.role, "full_name": profile.full_name, "stats": stats}


def success_rate(hired: int, total: int) -> float:
    """Hired share of all applications as a percentage, one decimal."""
    if total == 0:
        return 0.0
    return round(hired / total * 100, 1)


async def recruiter_analytics(db: AsyncSession, caller: Caller) -> Dict[str, Any]:
    """Aggregate numbers over every job the caller owns."""
    jobs_row = (
        await db.execute(
            select(
                func.count(Job.id),
                func.coalesce(
                    func.sum(case((Job.status == JobStatus.OPEN, 1), else_=0)), 0
                ),
                func.coalesce(func.sum(Job.views_count), 0),
            ).where(Job.recruiter_id == caller.identity_id)
        )
    ).one()
    total_jobs, active_jobs, total_views = jobs_row

    by_status = {status.value: 0 for status in ApplicationStatus}
    result = await db.execute(
        select(Application.status, func.count(Application.id))
        .join(Job, Application.job_id == Job.id)
        .where(Job.recruiter_id == caller.identity_id)
        .group_by(Application.status)
    )
    for status, count in result.all():
        by_status[ApplicationStatus(status).value] = count

    total_applications = sum(by_status.values())
    rate = success_rate(by_status[ApplicationStatus.HIRED.value], total_applications)

    logger.debug(
        f"Analytics for {caller.identity_id}: {total_jobs} jobs, "
        f"{total_applications} applications"
    )
    return {
        "total_jobs": total_jobs,
        "active_jobs": int(active_jobs),
        "total_applications": total_applications,
        "applications_by_status": by_status,
        "total_views": int(total_views),
        "success_rate": rate,
        "success_rate_display": format_percentage(rate),
    }
