"""Unit tests for S3-compatible avatar storage."""

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from saintshub_api.core.config import Settings
from saintshub_api.lib.storage import ObjectStoreError, S3ObjectStore, StoredObject, create_s3_client

_BUCKET = "test-bucket"


@pytest.fixture
def s3_client():
    """Create a moto-mocked S3 client and bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=_BUCKET)
        yield client


class TestCreateS3Client:
    def test_returns_configured_client(self) -> None:
        client = create_s3_client("https://r2.example.com", "test-key", "test-secret")
        assert hasattr(client, "put_object")


class TestS3ObjectStore:
    """Tests for S3ObjectStore.put_image."""

    async def test_uploads_with_content_type(self, s3_client) -> None:
        store = S3ObjectStore(s3_client, _BUCKET, "https://cdn.example.com/")

        stored = await store.put_image(b"\xff\xd8jpeg", "image/jpeg", prefix="user-avatars")

        assert stored.storage_id.startswith("user-avatars/")
        assert stored.storage_id.endswith(".jpg")
        assert stored.url == f"https://cdn.example.com/{stored.storage_id}"
        obj = s3_client.get_object(Bucket=_BUCKET, Key=stored.storage_id)
        assert obj["ContentType"] == "image/jpeg"
        assert obj["Body"].read() == b"\xff\xd8jpeg"

    async def test_unknown_type_gets_generic_extension(self, s3_client) -> None:
        store = S3ObjectStore(s3_client, _BUCKET, "https://cdn.example.com")

        stored = await store.put_image(b"data", "image/x-icon", prefix="/user-avatars/")

        assert stored.storage_id.startswith("user-avatars/")
        assert stored.storage_id.endswith(".bin")

    async def test_client_error_raises_store_error(self) -> None:
        client = MagicMock()
        client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject")
        store = S3ObjectStore(client, _BUCKET, "https://cdn.example.com")

        with pytest.raises(ObjectStoreError, match="Failed to store"):
            await store.put_image(b"data", "image/png", prefix="user-avatars")


class TestFromSettings:
    def test_requires_bucket_and_public_url(self, settings: Settings) -> None:
        with pytest.raises(ValueError, match="STORAGE_BUCKET"):
            S3ObjectStore.from_settings(settings)

    def test_builds_store(self, settings: Settings) -> None:
        configured = settings.model_copy(
            update={"storage_bucket": _BUCKET, "storage_public_url": "https://cdn.example.com"}
        )
        assert isinstance(S3ObjectStore.from_settings(configured), S3ObjectStore)


class TestStoredObject:
    def test_to_dict_keys(self) -> None:
        assert StoredObject("k", "u").to_dict() == {"storage_id": "k", "url": "u"}
