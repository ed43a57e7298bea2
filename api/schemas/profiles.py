"""Profile schemas."""

import uuid
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from api.schemas.common import ORMModel, TimestampMixin
from database.models.profiles import UserRole

# admin is never self-assigned
SelfAssignableRole = Literal["job_seeker", "recruiter"]


class ProfileResponse(ORMModel, TimestampMixin):
    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    company_name: Optional[str] = None
    resume_url: Optional[str] = None
    profile_image_url: Optional[str] = None
    skills: Optional[list[str]] = None
    experience_years: Optional[int] = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile. Omitted fields stay put."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[SelfAssignableRole] = None
    phone: Optional[str] = Field(None, max_length=40)
    location: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=5000)
    company_name: Optional[str] = Field(None, max_length=200)
    profile_image_url: Optional[str] = Field(None, max_length=2048)
    skills: Optional[list[str]] = None
    experience_years: Optional[int] = Field(None, ge=0, le=80)

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_full_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Trim each skill, drop blanks and refuse duplicates."""
        if v is None:
            return v
        cleaned = []
        for skill in v:
            skill = skill.strip()
            if not skill:
                continue
            if skill in cleaned:
                raise ValueError(f"Duplicate skill: {skill}")
            cleaned.append(skill)
        return cleaned


class ResumeUploadResponse(BaseModel):
    resume_url: str
    key: str
    size_bytes: int
