"""
Profile Model

One profile per identity, sharing the identity's id. Profiles are never
created by application code: the provisioning hook in ``database.triggers``
inserts them when an identity row is inserted.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Uuid, func

from database.engine import Base
from database.models.types import TextArray, pg_enum
from core.utils.datetime import now

if TYPE_CHECKING:
    from database.models.identities import Identity
    from database.models.jobs import Job
    from database.models.applications import Application
    from database.models.saved_jobs import SavedJob


class UserRole(str, PyEnum):
    """Role of a profile."""

    JOB_SEEKER = "job_seeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("identities.id", ondelete="CASCADE"), primary_key=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        pg_enum(UserRole, "user_role"),
        nullable=False,
        default=UserRole.JOB_SEEKER,
        server_default=UserRole.JOB_SEEKER.value,
    )

    phone: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(Text)
    bio: Mapped[str | None] = mapped_column(Text)
    company_name: Mapped[str | None] = mapped_column(Text)
    resume_url: Mapped[str | None] = mapped_column(Text)
    profile_image_url: Mapped[str | None] = mapped_column(Text)
    skills: Mapped[list[str] | None] = mapped_column(TextArray)
    experience_years: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    identity: Mapped["Identity"] = relationship("Identity", back_populates="profile")
    jobs: Mapped[list["Job"]] = relationship(
        "Job", back_populates="recruiter", cascade="all, delete-orphan", passive_deletes=True
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="applicant", cascade="all, delete-orphan", passive_deletes=True
    )
    saved_jobs: Mapped[list["SavedJob"]] = relationship(
        "SavedJob", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
