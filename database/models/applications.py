"""
Application Models

A job seeker's application to a job. At most one per (job, applicant); the
unique constraint is what settles concurrent double-apply attempts.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Text,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    Uuid,
    func,
)

from database.engine import Base
from database.models.types import pg_enum
from core.utils.datetime import now

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.profiles import Profile


# ==================== Application Enums ===================== #
class ApplicationStatus(str, PyEnum):
    """Where an application stands with the recruiter."""

    APPLIED = "applied"
    VIEWED = "viewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


# ==================== Application Model ===================== #
class Application(Base):
    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    applicant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        pg_enum(ApplicationStatus, "application_status"),
        nullable=False,
        default=ApplicationStatus.APPLIED,
        server_default=ApplicationStatus.APPLIED.value,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text)
    resume_url: Mapped[str | None] = mapped_column(Text)

    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now,
        server_default=func.now(),
        onupdate=now,
    )

    job: Mapped["Job"] = relationship("Job", back_populates="applications")
    applicant: Mapped["Profile"] = relationship("Profile", back_populates="applications")

    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
        Index("idx_applications_job_id", "job_id"),
        Index("idx_applications_applicant_id", "applicant_id"),
    )
