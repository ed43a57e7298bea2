"""
Jobs Module

Job postings owned by a recruiter profile, with denormalized view and
application counters.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Text,
    Integer,
    DateTime,
    ForeignKey,
    Index,
    Uuid,
    func,
)

from database.engine import Base
from database.models.types import TextArray, pg_enum
from core.utils.datetime import now

if TYPE_CHECKING:
    from database.models.profiles import Profile
    from database.models.applications import Application
    from database.models.saved_jobs import SavedJob


# ==================== Job Enums ===================== #
class JobStatus(str, PyEnum):
    """Job posting status."""

    OPEN = "open"
    CLOSED = "closed"
    PAUSED = "paused"


# ==================== Job Model ===================== #
class Job(Base):
    """
    A posting. Only ``open`` jobs are visible to anyone but the owning
    recruiter; see the Job policy in ``core.middleware.authorization``.
    """

    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recruiter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    job_type: Mapped[str] = mapped_column(Text, nullable=False)  # free text
    salary_min: Mapped[int | None] = mapped_column(Integer)
    salary_max: Mapped[int | None] = mapped_column(Integer)
    required_skills: Mapped[list[str]] = mapped_column(TextArray, nullable=False)
    experience_required: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[JobStatus] = mapped_column(
        pg_enum(JobStatus, "job_status"),
        nullable=False,
        default=JobStatus.OPEN,
        server_default=JobStatus.OPEN.value,
    )

    # Counters
    views_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    applications_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    # Timestamps
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

    # Relationships
    recruiter: Mapped["Profile"] = relationship("Profile", back_populates="jobs")
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="job", cascade="all, delete-orphan", passive_deletes=True
    )
    saves: Mapped[list["SavedJob"]] = relationship(
        "SavedJob", back_populates="job", cascade="all, delete-orphan", passive_deletes=True
    )

    # Indexes
    __table_args__ = (
        Index("idx_jobs_recruiter_id", "recruiter_id"),
        Index("idx_jobs_status", "status"),
    )
