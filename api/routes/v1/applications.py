"""
Application endpoints.

Applicants see what they submitted; recruiters review and move the
applications received on their jobs. Applying lives under ``/jobs/{id}/apply``.
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, require_caller, require_recruiter
from api.schemas.applications import (
    ApplicationStatusUpdate,
    ApplicationWithApplicant,
    ApplicationWithJob,
)
from api.services import applications as application_service
from core.middleware.authorization import Caller
from database.models.applications import ApplicationStatus

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get(
    "/mine",
    response_model=list[ApplicationWithJob],
    summary="List My Applications",
)
async def list_my_applications(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    applications = await application_service.list_my_applications(db, caller)
    return [ApplicationWithJob.model_validate(a) for a in applications]


@router.get(
    "/received",
    response_model=list[ApplicationWithApplicant],
    summary="List Received Applications",
    description="Applications to the recruiter's jobs with applicant contact, newest first.",
)
async def list_received_applications(
    application_status: Optional[ApplicationStatus] = Query(
        None, alias="status", description="Filter by application status"
    ),
    job_id: Optional[uuid.UUID] = Query(None, description="Filter by job"),
    caller: Caller = Depends(require_recruiter),
    db: AsyncSession = Depends(get_db),
):
    applications = await application_service.list_received_applications(
        db, caller, status=application_status, job_id=job_id
    )
    return [ApplicationWithApplicant.model_validate(a) for a in applications]


@router.get(
    "/{application_id}",
    response_model=ApplicationWithApplicant,
    summary="Get Application",
)
async def get_application(
    application_id: uuid.UUID = Path(..., description="Application ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.get_application(db, caller, application_id)
    return ApplicationWithApplicant.model_validate(application)


@router.patch(
    "/{application_id}/status",
    response_model=ApplicationWithApplicant,
    summary="Update Application Status",
    description="Only the recruiter owning the job may change the status.",
)
async def update_application_status(
    payload: ApplicationStatusUpdate,
    application_id: uuid.UUID = Path(..., description="Application ID"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.update_application_status(
        db, caller, application_id, payload.status
    )
    return ApplicationWithApplicant.model_validate(application)
