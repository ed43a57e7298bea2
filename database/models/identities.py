"""
Identity Model

Authenticated end-user accounts. This table plays the part of the external
auth provider's user table: profiles hang off it and are provisioned from it.
"""

import uuid
from datetime import datetime
from typing import Any, TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, JSON, Uuid, func

from database.engine import Base
from core.utils.datetime import now

if TYPE_CHECKING:
    from database.models.profiles import Profile


class Identity(Base):
    """
    An account that can sign in.

    ``raw_user_meta_data`` carries whatever the client sent at signup
    (currently only ``full_name``) and is read once by the provisioning hook.
    """

    __tablename__ = "identities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_user_meta_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, server_default=func.now()
    )

    profile: Mapped["Profile"] = relationship(
        "Profile",
        back_populates="identity",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
