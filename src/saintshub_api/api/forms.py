"""Reading request bodies that may arrive as JSON or multipart form data."""

from typing import Any

from fastapi import Request
from starlette.datastructures import UploadFile

from saintshub_api.core.errors import BadRequest
from saintshub_api.services.avatar_service import ImageUpload, ensure_image

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_payload(request: Request, file_field: str = "avatar") -> tuple[dict[str, Any], UploadFile | None]:
    """Return the request's fields and its optional uploaded file.

    Args:
        request: The incoming request.
        file_field: Form field that may carry a file.

    Raises:
        BadRequest: If a JSON body is malformed or not an object.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        data: dict[str, Any] = {}
        upload: UploadFile | None = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == file_field and value.filename:
                    upload = value
            else:
                data[key] = value
        return data, upload

    raw = await request.body()
    if not raw:
        return {}, None
    try:
        body = await request.json()
    except ValueError as exc:
        raise BadRequest("Request body must be valid JSON.") from exc
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object.")
    return body, None


async def read_image(upload: UploadFile) -> ImageUpload:
    """Read an uploaded file, rejecting anything that is not an image."""
    content_type = ensure_image(upload.content_type)
    return ImageUpload(content=await upload.read(), content_type=content_type, filename=upload.filename)
