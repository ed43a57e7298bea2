"""Resume object storage interface and errors."""

from abc import ABC, abstractmethod
from typing import Optional
import re
import uuid


class StorageError(Exception):
    """Base class for object storage failures surfaced to API callers."""

    status_code = 502
    code = "STORAGE_ERROR"
    default_message = "File storage is unavailable"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ObjectNotFound(StorageError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "File not found"


class ResumeTooLargeError(StorageError):
    status_code = 413
    code = "FILE_TOO_LARGE"
    default_message = "Resume exceeds the maximum upload size"


class InvalidKeyError(StorageError):
    status_code = 400
    code = "INVALID_KEY"
    default_message = "Invalid storage key"


def resume_key(identity_id, extension: str) -> str:
    """Storage key for an identity's resume: ``{identity_id}/resume.{ext}``."""
    return f"{identity_id}/resume.{extension}"


RESUME_KEY_PATTERN = re.compile(r"(?P<owner>[0-9a-f-]{36})/resume\.[a-z0-9]{1,10}")


def resume_key_owner(key: str) -> Optional[uuid.UUID]:
    """
    Owning identity of a well-formed resume key, else None.

    Only ``{identity_id}/resume.{ext}`` exactly, with the id in canonical
    form, so a key can never name another identity's object through
    ``..`` or extra segments.
    """
    match = RESUME_KEY_PATTERN.fullmatch(key)
    if match is None:
        return None
    try:
        owner = uuid.UUID(match.group("owner"))
    except ValueError:
        return None
    if str(owner) != match.group("owner"):
        return None
    return owner


class ResumeStorage(ABC):
    """
    Object store for resumes, addressed by key.

    Keys always start with the owning identity id; the access policy for
    ``ResumeObject`` relies on that.
    """

    @abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Store ``data`` at ``key``, replacing any existing object."""

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Return the object at ``key``; raise ``ObjectNotFound`` if absent."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the object at ``key``. Returns False if it was absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Whether an object is stored at ``key``."""
