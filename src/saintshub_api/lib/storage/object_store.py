"""Image storage in S3-compatible object storage (Cloudflare R2, AWS S3, MinIO).

Provides an ``ObjectStore`` Protocol and an ``S3ObjectStore`` implementation
backed by boto3.  boto3 is synchronous, so uploads run in a worker thread.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from saintshub_api.core.config import Settings

_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


class ObjectStoreError(Exception):
    """Raised when an object cannot be stored."""


@dataclass(frozen=True)
class StoredObject:
    """Descriptor of a stored object.

    Attributes:
        storage_id: Object key inside the bucket.
        url: Public URL under which the object is served.
    """

    storage_id: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"storage_id": self.storage_id, "url": self.url}


class ObjectStore(Protocol):
    """Abstract image store used for avatars."""

    async def put_image(self, content: bytes, content_type: str, *, prefix: str) -> StoredObject:
        """Store image bytes and return their descriptor.

        Args:
            content: Raw image bytes.
            content_type: MIME type of the image.
            prefix: Key prefix (folder) for the object.

        Returns:
            The stored object's id and public URL.

        Raises:
            ObjectStoreError: If the upload failed.
        """
        ...


def create_s3_client(
    endpoint_url: str | None,
    access_key_id: str | None,
    secret_access_key: str | None,
    region: str = "auto",
) -> Any:
    """Create a boto3 S3 client for an S3-compatible endpoint.

    Checksum calculation is limited to when the service requires it, which
    R2 needs with boto3 1.36+.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
    )
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region,
        config=config,
    )


class S3ObjectStore:
    """boto3-backed implementation of ObjectStore.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        public_url: URL prefix under which bucket keys are publicly served.
    """

    def __init__(self, client: Any, bucket: str, public_url: str) -> None:
        self._client = client
        self._bucket = bucket
        self._public_url = public_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        if not settings.storage_bucket or not settings.storage_public_url:
            msg = "STORAGE_BUCKET and STORAGE_PUBLIC_URL are required when storage is enabled"
            raise ValueError(msg)
        client = create_s3_client(
            settings.storage_endpoint_url,
            settings.storage_access_key_id,
            settings.storage_secret_access_key,
            settings.storage_region,
        )
        return cls(client, settings.storage_bucket, settings.storage_public_url)

    async def put_image(self, content: bytes, content_type: str, *, prefix: str) -> StoredObject:
        extension = _EXTENSIONS.get(content_type, "bin")
        key = f"{prefix.strip('/')}/{uuid.uuid4().hex}.{extension}"
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            msg = f"Failed to store s3://{self._bucket}/{key}: {exc}"
            raise ObjectStoreError(msg) from exc
        logger.info("Stored {} ({} bytes) at s3://{}/{}", content_type, len(content), self._bucket, key)
        return StoredObject(storage_id=key, url=f"{self._public_url}/{key}")
