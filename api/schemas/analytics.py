"""Dashboard and recruiter analytics schemas."""

from typing import Optional
from pydantic import BaseModel, Field

from database.models.profiles import UserRole


class DashboardStats(BaseModel):
    # job seekers
    applications: Optional[int] = None
    saved_jobs: Optional[int] = None
    # recruiters
    active_jobs: Optional[int] = None
    total_applicants: Optional[int] = None


class DashboardResponse(BaseModel):
    role: UserRole
    full_name: str
    stats: DashboardStats


class AnalyticsResponse(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    applications_by_status: dict[str, int] = Field(
        description="Count per application status, every status present"
    )
    total_views: int
    success_rate: float = Field(description="Hired / total applications x 100, one decimal")
    success_rate_display: str
