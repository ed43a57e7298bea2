"""Application schemas."""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from api.schemas.common import ORMModel
from api.schemas.jobs import JobSummary
from database.models.applications import ApplicationStatus


class ApplyRequest(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=10000)
    resume_url: Optional[str] = Field(
        None, max_length=2048, description="Defaults to the applicant's profile resume"
    )


class ApplicationResponse(ORMModel):
    id: uuid.UUID
    job_id: uuid.UUID
    applicant_id: uuid.UUID
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    applied_at: datetime
    updated_at: datetime


class ApplicantSummary(ORMModel):
    """Applicant contact details shown to the recruiter."""

    id: uuid.UUID
    full_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[list[str]] = None
    experience_years: Optional[int] = None
    resume_url: Optional[str] = None


class ApplicationWithJob(ApplicationResponse):
    job: JobSummary


class ApplicationWithApplicant(ApplicationResponse):
    job: JobSummary
    applicant: ApplicantSummary


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
