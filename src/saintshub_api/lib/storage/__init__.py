"""Object storage library: image uploads to S3-compatible storage."""

from saintshub_api.lib.storage.object_store import (
    ObjectStore,
    ObjectStoreError,
    S3ObjectStore,
    StoredObject,
    create_s3_client,
)

__all__ = [
    "ObjectStore",
    "ObjectStoreError",
    "S3ObjectStore",
    "StoredObject",
    "create_s3_client",
]
