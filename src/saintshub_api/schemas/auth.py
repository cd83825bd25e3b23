"""Identity request and response schemas.

Request contracts validate signup, login, and profile changes; response
schemas never expose the password hash.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import AfterValidator, EmailStr, Field

from saintshub_api.core.errors import Violation
from saintshub_api.models.user import LEADERSHIP_ROLES
from saintshub_api.schemas.common import CamelModel


def _not_blank(message: str) -> AfterValidator:
    def check(value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _lower(value: str) -> str:
    return value.lower()


FirstName = Annotated[str, _not_blank("First name cannot be empty")]
LastName = Annotated[str, _not_blank("Last name cannot be empty")]
Email = Annotated[EmailStr, AfterValidator(_lower)]
Language = Literal["en", "fr"]
Role = Literal["standard", "pastor", "IT"]


class SignupRequest(CamelModel):
    """Registration payload (JSON body or multipart form fields)."""

    first_name: FirstName
    last_name: LastName
    email: Email
    password: str = Field(min_length=8)
    language: Language = "en"
    role: Role = "standard"
    church_selection: str | None = Field(default=None, max_length=200)


def require_church_selection(payload: Mapping[str, Any]) -> Violation | None:
    """Pastors and IT must name the church they belong to."""
    role = payload.get("role")
    if role not in LEADERSHIP_ROLES:
        return None
    selection = payload.get("churchSelection", payload.get("church_selection"))
    if isinstance(selection, str) and selection.strip():
        return None
    return Violation(path="churchSelection", message="Church selection is required for pastors and IT.")


class LoginRequest(CamelModel):
    """Login with email and password."""

    email: Email
    password: str = Field(min_length=1)


class UpdateMeRequest(CamelModel):
    """Profile update; every field optional, at least one required by the service."""

    first_name: FirstName | None = None
    last_name: LastName | None = None
    email: Email | None = None
    language: Language | None = None


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=1)


class AvatarDescriptor(CamelModel):
    """Stored avatar image."""

    storage_id: str
    url: str


class UserResponse(CamelModel):
    """Identity projection returned to clients."""

    id: UUID
    first_name: str
    last_name: str
    email: str
    language: str
    role: str
    is_admin: bool
    church_selection: str | None = None
    avatar: AvatarDescriptor | None = None
    created_at: datetime
    updated_at: datetime


class PublicUserResponse(CamelModel):
    """Profile fields visible without authentication."""

    id: UUID
    first_name: str
    last_name: str
    role: str
    avatar: AvatarDescriptor | None = None


class AuthResponse(CamelModel):
    """Token issued on signup or login."""

    status: Literal["success"] = "success"
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    status: Literal["success"] = "success"
    user: UserResponse


class PublicUserEnvelope(CamelModel):
    status: Literal["success"] = "success"
    user: PublicUserResponse


class UserListEnvelope(CamelModel):
    status: Literal["success"] = "success"
    results: int
    users: list[UserResponse]


class ApprovalResponse(CamelModel):
    status: Literal["success"] = "success"
    message: str
    user: UserResponse
