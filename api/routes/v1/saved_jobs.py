"""Saved job listing. Saving and unsaving live under ``/jobs/{id}/save``."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, require_caller
from api.schemas.saved_jobs import SavedJobWithJob
from api.services import saved_jobs as saved_job_service
from core.middleware.authorization import Caller

router = APIRouter(prefix="/saved-jobs", tags=["Saved Jobs"])


@router.get("", response_model=list[SavedJobWithJob], summary="List Saved Jobs")
async def list_saved_jobs(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    saved = await saved_job_service.list_saved_jobs(db, caller)
    return [SavedJobWithJob.model_validate(s) for s in saved]
