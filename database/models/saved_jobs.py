"""Saved job bookmarks."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, Uuid, func

from database.engine import Base
from core.utils.datetime import now

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.profiles import Profile


class SavedJob(Base):
    __tablename__ = "saved_jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    job: Mapped["Job"] = relationship("Job", back_populates="saves")
    user: Mapped["Profile"] = relationship("Profile", back_populates="saved_jobs")

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_saved_jobs_job_user"),
        Index("idx_saved_jobs_user_id", "user_id"),
    )
