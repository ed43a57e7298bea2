"""Builds the configured resume storage backend."""

from functools import lru_cache

from core.config import settings
from core.storage.base import ResumeStorage


@lru_cache
def get_storage() -> ResumeStorage:
    """
    Storage backend selected by ``STORAGE_BACKEND``.

    Used as a FastAPI dependency, so tests can swap it through
    ``app.dependency_overrides``.
    """
    if settings.storage_backend == "s3":
        from core.storage.s3 import S3Storage

        return S3Storage(
            bucket_name=settings.aws_s3_bucket,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            endpoint_url=settings.aws_endpoint_url,
        )

    from core.storage.local import LocalStorage

    return LocalStorage(settings.local_storage_path)
