"""
Job posting endpoints.

Open jobs are public. Recruiters post jobs and manage their own postings in
any status. Job seekers apply to and bookmark jobs from here too.
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_caller,
    get_db,
    get_pagination,
    require_caller,
    require_recruiter,
)
from api.schemas.applications import ApplicationResponse, ApplyRequest
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.jobs import (
    JobCreate,
    JobDetailResponse,
    JobListItem,
    JobResponse,
    JobUpdate,
)
from api.schemas.saved_jobs import SavedJobResponse
from api.services import applications as application_service
from api.services import jobs as job_service
from api.services import saved_jobs as saved_job_service
from core.middleware.authorization import Caller
from database.models.jobs import JobStatus

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get(
    "",
    response_model=PaginatedResponse[JobListItem],
    summary="List Jobs",
    description="Open jobs, plus the caller's own postings in any status. Newest first.",
)
async def list_jobs(
    search: Optional[str] = Query(None, description="Match title, company or a required skill"),
    location: Optional[str] = Query(None, description="Location substring"),
    job_status: Optional[JobStatus] = Query(None, alias="status", description="Filter by status"),
    pagination: PaginationParams = Depends(get_pagination),
    caller: Caller | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.list_jobs(
        db,
        caller,
        pagination,
        search=search,
        location=location,
        status=job_status,
    )
    saved = await job_service.saved_job_ids(db, caller, [job.id for job in jobs])
    items = [
        JobListItem.model_validate(job).model_copy(update={"is_saved": job.id in saved})
        for job in jobs
    ]
    return PaginatedResponse[JobListItem].create(items, total, pagination)


@router.get(
    "/mine",
    response_model=list[JobResponse],
    summary="List My Jobs",
    description="The recruiter's own postings in every status.",
)
async def list_my_jobs(
    caller: Caller = Depends(require_recruiter),
    db: AsyncSession = Depends(get_db),
):
    jobs = await job_service.list_recruiter_jobs(db, caller)
    return [JobResponse.model_validate(job) for job in jobs]


@router.get("/{job_id}", response_model=JobDetailResponse, summary="Get Job Details")
async def get_job(
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """A visible job with the caller's relationship to it. Counts a view."""
    job, context = await job_service.get_job(db, caller, job_id)
    return JobDetailResponse.model_validate(job).model_copy(update=context)


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post Job",
)
async def create_job(
    payload: JobCreate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.create_job(db, caller, payload.model_dump())
    return JobResponse.model_validate(job)


@router.patch(
    "/{job_id}",
    response_model=JobResponse,
    summary="Update Job",
    description="Owner only. Any field, including status, in any status.",
)
async def update_job(
    payload: JobUpdate,
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.update_job(
        db, caller, job_id, payload.model_dump(exclude_unset=True)
    )
    return JobResponse.model_validate(job)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Job",
    description="Owner only. Applications and saves of the job are removed with it.",
)
async def delete_job(
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_job(db, caller, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Applying ==================== #

@router.post(
    "/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Job",
    description="Job seekers only; one application per job.",
)
async def apply_to_job(
    payload: Optional[ApplyRequest] = None,
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    payload = payload or ApplyRequest()
    application = await application_service.apply_to_job(
        db,
        caller,
        job_id,
        cover_letter=payload.cover_letter,
        resume_url=payload.resume_url,
    )
    return ApplicationResponse.model_validate(application)


# ==================== Bookmarks ==================== #

@router.put(
    "/{job_id}/save",
    response_model=SavedJobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save Job",
)
async def save_job(
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    saved = await saved_job_service.save_job(db, caller, job_id)
    return SavedJobResponse.model_validate(saved)


@router.delete(
    "/{job_id}/save",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unsave Job",
)
async def unsave_job(
    job_id: uuid.UUID = Path(..., description="Job ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    await saved_job_service.unsave_job(db, caller, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
