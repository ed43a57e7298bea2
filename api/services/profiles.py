"""Profile service functions, including resume storage."""

import mimetypes
from typing import Any, Dict, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.middleware.authorization import (
    Caller,
    Operation,
    ResumeObject,
    authorize,
    load_authorized,
)
from core.security import AuditAction, ResourceType, log_audit_event
from core.storage.base import (
    InvalidKeyError,
    ResumeStorage,
    ResumeTooLargeError,
    resume_key,
    resume_key_owner,
)
from core.utils.formatting import file_extension, format_file_size
from database.models.profiles import Profile, UserRole

logger = logging.getLogger(__name__)

RESUME_URL_PREFIX = f"{settings.api_v1_prefix}/resumes/"


def resume_url_for(key: str) -> str:
    """API path serving the resume stored at ``key``."""
    return f"{RESUME_URL_PREFIX}{key}"


def key_from_resume_url(url: Optional[str]) -> Optional[str]:
    if url and url.startswith(RESUME_URL_PREFIX):
        return url[len(RESUME_URL_PREFIX):]
    return None


async def get_profile(
    db: AsyncSession, caller: Optional[Caller], profile_id: uuid.UUID
) -> Profile:
    """Any profile is readable, including by anonymous callers."""
    return await load_authorized(db, caller, Profile, profile_id)


async def update_profile(
    db: AsyncSession, caller: Caller, changes: Dict[str, Any]
) -> Profile:
    """
    Apply ``changes`` to the caller's own profile.

    ``role`` may only move between job_seeker and recruiter; the schema
    rejects anything else before it gets here.
    """
    profile = await load_authorized(
        db, caller, Profile, caller.identity_id, Operation.UPDATE
    )

    if "role" in changes and changes["role"] is not None:
        changes["role"] = UserRole(changes["role"])

    for field, value in changes.items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)

    await log_audit_event(
        action=AuditAction.UPDATE,
        resource_type=ResourceType.PROFILE,
        resource_id=profile.id,
        identity_id=caller.identity_id,
        details={"fields": sorted(changes)},
    )
    return profile


async def upload_resume(
    db: AsyncSession,
    caller: Caller,
    storage: ResumeStorage,
    filename: str,
    data: bytes,
    content_type: Optional[str] = None,
) -> tuple[Profile, str]:
    """
    Store the caller's resume at ``{identity_id}/resume.{ext}``, replacing
    any earlier upload, and point the profile's ``resume_url`` at it.

    Raises:
        ResumeTooLargeError: ``data`` exceeds ``RESUME_MAX_BYTES``
    """
    if len(data) > settings.resume_max_bytes:
        raise ResumeTooLargeError(
            f"Resume is {format_file_size(len(data))}; the limit is "
            f"{format_file_size(settings.resume_max_bytes)}"
        )

    key = resume_key(caller.identity_id, file_extension(filename))
    await authorize(db, caller, Operation.CREATE, ResumeObject(key))

    profile = await load_authorized(
        db, caller, Profile, caller.identity_id, Operation.UPDATE
    )
    previous_key = key_from_resume_url(profile.resume_url)

    await storage.upload(key, data, content_type=content_type)

    if previous_key and previous_key != key:
        # a different extension leaves the old object behind otherwise
        await storage.delete(previous_key)

    profile.resume_url = resume_url_for(key)
    await db.commit()
    await db.refresh(profile)

    await log_audit_event(
        action=AuditAction.UPDATE,
        resource_type=ResourceType.RESUME,
        resource_id=key,
        identity_id=caller.identity_id,
        details={"size_bytes": len(data)},
    )
    return profile, key


async def download_resume(
    db: AsyncSession,
    caller: Optional[Caller],
    storage: ResumeStorage,
    key: str,
) -> tuple[bytes, str]:
    """
    Resume bytes and media type. Readable by the owner and by recruiters
    who received an application from the owner.

    Raises:
        InvalidKeyError: ``key`` is not ``{identity_id}/resume.{ext}``
    """
    if resume_key_owner(key) is None:
        raise InvalidKeyError()
    await authorize(db, caller, Operation.READ, ResumeObject(key))
    data = await storage.download(key)
    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return data, media_type
