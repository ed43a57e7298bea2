"""S3 storage backend for resumes."""

from typing import Optional
import logging

import aioboto3
from botocore.exceptions import ClientError

from core.storage.base import ResumeStorage, ObjectNotFound, StorageError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3Storage(ResumeStorage):
    """S3 storage handler for async operations."""

    def __init__(
        self,
        bucket_name: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize S3 storage.

        Args:
            bucket_name: Bucket holding the resumes
            region: AWS region
            access_key_id: Explicit credentials (default credential chain if omitted)
            secret_access_key: Explicit credentials
            endpoint_url: Override for S3-compatible services such as MinIO
        """
        if not bucket_name:
            raise ValueError("S3 bucket name must be provided")

        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.session_kwargs = {"region_name": region}
        if access_key_id and secret_access_key:
            self.session_kwargs["aws_access_key_id"] = access_key_id
            self.session_kwargs["aws_secret_access_key"] = secret_access_key

    def _client(self):
        session = aioboto3.Session(**self.session_kwargs)
        return session.client("s3", endpoint_url=self.endpoint_url)

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        upload_args = {"Bucket": self.bucket_name, "Key": key, "Body": data}
        if content_type:
            upload_args["ContentType"] = content_type

        async with self._client() as client:
            try:
                await client.put_object(**upload_args)
            except ClientError as e:
                logger.error(f"S3 upload failed for {self.bucket_name}/{key}: {e}")
                raise StorageError()

        logger.info(f"Uploaded file to S3: {self.bucket_name}/{key}")
        return key

    async def download(self, key: str) -> bytes:
        async with self._client() as client:
            try:
                response = await client.get_object(Bucket=self.bucket_name, Key=key)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                    raise ObjectNotFound()
                logger.error(f"S3 download failed for {self.bucket_name}/{key}: {e}")
                raise StorageError()

            async with response["Body"] as stream:
                return await stream.read()

    async def delete(self, key: str) -> bool:
        if not await self.exists(key):
            return False
        async with self._client() as client:
            await client.delete_object(Bucket=self.bucket_name, Key=key)
        logger.info(f"Deleted file from S3: {self.bucket_name}/{key}")
        return True

    async def exists(self, key: str) -> bool:
        async with self._client() as client:
            try:
                await client.head_object(Bucket=self.bucket_name, Key=key)
                return True
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                    return False
                raise
