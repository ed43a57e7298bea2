"""Dashboard and recruiter analytics endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, require_caller, require_recruiter
from api.schemas.analytics import AnalyticsResponse, DashboardResponse
from api.services import analytics as analytics_service
from core.middleware.authorization import Caller

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard",
    description="Job seekers get application and saved counts; recruiters get open jobs and applicants.",
)
async def get_dashboard(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return DashboardResponse(**await analytics_service.dashboard(db, caller))


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Recruiter Analytics",
)
async def get_analytics(
    caller: Caller = Depends(require_recruiter),
    db: AsyncSession = Depends(get_db),
):
    return AnalyticsResponse(**await analytics_service.recruiter_analytics(db, caller))
