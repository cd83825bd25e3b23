"""Avatar image uploads.

An upload is primary on ``update-avatar`` and ``updateMe`` (failure is
``UploadFailed``) and best-effort during signup (failure is logged and the
identity is created without an avatar).
"""

from dataclasses import dataclass

from saintshub_api.core.config import Settings
from saintshub_api.core.errors import BadRequest, UploadFailed
from saintshub_api.lib.storage import ObjectStore, ObjectStoreError, StoredObject
from saintshub_api.services.notification_service import dispatch_non_critical

NOT_AN_IMAGE = "Not an image! Please upload only images."


@dataclass(frozen=True)
class ImageUpload:
    """An image file read from a multipart request."""

    content: bytes
    content_type: str
    filename: str | None = None


def ensure_image(content_type: str | None) -> str:
    """Reject anything that is not ``image/*``.

    Raises:
        BadRequest: If the content type is missing or not an image.
    """
    if not content_type or not content_type.startswith("image/"):
        raise BadRequest(NOT_AN_IMAGE)
    return content_type


async def store_avatar(store: ObjectStore | None, settings: Settings, upload: ImageUpload) -> StoredObject:
    """Upload an avatar as the primary action of a request.

    Raises:
        UploadFailed: If storage is disabled or the upload failed.
    """
    if store is None:
        raise UploadFailed("Image storage is not configured.")
    try:
        return await store.put_image(upload.content, upload.content_type, prefix=settings.storage_avatar_prefix)
    except ObjectStoreError as exc:
        raise UploadFailed from exc


async def try_store_avatar(
    store: ObjectStore | None,
    settings: Settings,
    upload: ImageUpload,
) -> StoredObject | None:
    """Upload an avatar on a best-effort basis; returns None on failure."""
    stored: list[StoredObject] = []

    async def send() -> None:
        stored.append(await store_avatar(store, settings, upload))

    await dispatch_non_critical("signup avatar upload", send)
    return stored[0] if stored else None
