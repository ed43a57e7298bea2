"""Job posting schemas."""

import uuid
from typing import Optional
from pydantic import BaseModel, Field, computed_field, field_validator

from api.schemas.common import ORMModel, TimestampMixin
from core.utils.datetime import format_posted_ago
from core.utils.formatting import format_salary_range, normalize_skills
from database.models.jobs import JobStatus


def _required_skills(v: list[str]) -> list[str]:
    cleaned = normalize_skills(v)
    if not cleaned:
        raise ValueError("At least one required skill is needed")
    return cleaned


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=200)
    job_type: str = Field(..., min_length=1, max_length=50, description="e.g. full-time, contract")
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    required_skills: list[str]
    experience_required: Optional[int] = Field(None, ge=0, le=80)
    status: JobStatus = JobStatus.OPEN

    @field_validator("title", "description", "company_name", "location", "job_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("required_skills")
    @classmethod
    def clean_required_skills(cls, v: list[str]) -> list[str]:
        return _required_skills(v)


class JobUpdate(BaseModel):
    """Partial update; only supplied fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    job_type: Optional[str] = Field(None, min_length=1, max_length=50)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    required_skills: Optional[list[str]] = None
    experience_required: Optional[int] = Field(None, ge=0, le=80)
    status: Optional[JobStatus] = None

    @field_validator("required_skills")
    @classmethod
    def clean_required_skills(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        return _required_skills(v)


class JobResponse(ORMModel, TimestampMixin):
    id: uuid.UUID
    recruiter_id: uuid.UUID
    title: str
    description: str
    company_name: str
    location: str
    job_type: str
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    required_skills: list[str]
    experience_required: Optional[int] = None
    status: JobStatus
    views_count: int
    applications_count: int

    @computed_field
    @property
    def salary_display(self) -> str:
        return format_salary_range(self.salary_min, self.salary_max)

    @computed_field
    @property
    def posted_ago(self) -> str:
        return format_posted_ago(self.created_at)


class JobSummary(ORMModel):
    """Compact job view embedded in applications and saved jobs."""

    id: uuid.UUID
    title: str
    company_name: str
    location: str
    job_type: str
    status: JobStatus
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None

    @computed_field
    @property
    def salary_display(self) -> str:
        return format_salary_range(self.salary_min, self.salary_max)


class JobDetailResponse(JobResponse):
    """Job detail with the caller's relationship to it."""

    is_owner: bool = False
    has_applied: bool = False
    is_saved: bool = False


class JobListItem(JobResponse):
    is_saved: bool = False
