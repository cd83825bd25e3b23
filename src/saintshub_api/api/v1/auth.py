"""Identity API endpoints.

POST /auth/signup, POST /auth/login, POST /auth/logout, GET /auth/me,
GET /auth/users/{id}, PATCH /auth/updateMe, PATCH /auth/update-password,
PATCH /auth/update-avatar.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from saintshub_api.api.forms import read_image, read_payload
from saintshub_api.core.dependencies import IdentityDep, SessionDep, SettingsDep, get_mailer, get_object_store
from saintshub_api.core.errors import BadRequest
from saintshub_api.core.validation import validate_payload
from saintshub_api.lib.mailer import Mailer
from saintshub_api.lib.storage import ObjectStore
from saintshub_api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    PublicUserEnvelope,
    PublicUserResponse,
    SignupRequest,
    UpdateMeRequest,
    UpdatePasswordRequest,
    UserEnvelope,
    UserResponse,
    require_church_selection,
)
from saintshub_api.schemas.common import MessageResponse
from saintshub_api.services import auth_service, avatar_service, notification_service

router = APIRouter(prefix="/auth", tags=["auth"])

MailerDep = Annotated[Mailer, Depends(get_mailer)]
ObjectStoreDep = Annotated[ObjectStore | None, Depends(get_object_store)]


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: Request,
    session: SessionDep,
    settings: SettingsDep,
    mailer: MailerDep,
    store: ObjectStoreDep,
) -> AuthResponse:
    """Register an identity from a JSON body or multipart form with optional ``avatar``."""
    data, upload = await read_payload(request)
    contract = validate_payload(SignupRequest, data, rules=[require_church_selection])
    image = await read_image(upload) if upload is not None else None

    await auth_service.ensure_email_available(session, contract.email)
    avatar = await avatar_service.try_store_avatar(store, settings, image) if image is not None else None
    user = await auth_service.create_user(session, contract, avatar)

    token = auth_service.issue_token(user, settings)
    await notification_service.notify_signup(mailer, user)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, session: SessionDep, settings: SettingsDep) -> AuthResponse:
    user = await auth_service.authenticate_user(session, body.email, body.password)
    return AuthResponse(token=auth_service.issue_token(user, settings), user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(identity: IdentityDep) -> MessageResponse:
    """Acknowledge logout; tokens are stateless, so the client discards its own."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def get_me(identity: IdentityDep, session: SessionDep) -> UserEnvelope:
    user = await auth_service.get_user(session, identity.id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.get("/users/{user_id}", response_model=PublicUserEnvelope)
async def get_user(user_id: uuid.UUID, session: SessionDep) -> PublicUserEnvelope:
    """Public profile of any identity."""
    user = await auth_service.get_user(session, user_id)
    return PublicUserEnvelope(user=PublicUserResponse.model_validate(user))


@router.patch("/updateMe", response_model=UserEnvelope)
async def update_me(
    request: Request,
    identity: IdentityDep,
    session: SessionDep,
    settings: SettingsDep,
    store: ObjectStoreDep,
) -> UserEnvelope:
    """Update profile fields; a multipart ``avatar`` file replaces the avatar too."""
    data, upload = await read_payload(request)
    changes = auth_service.profile_changes(validate_payload(UpdateMeRequest, data))

    avatar = None
    if upload is not None:
        avatar = await avatar_service.store_avatar(store, settings, await read_image(upload))

    user = await auth_service.update_profile(session, identity.id, changes, avatar)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.patch("/update-password", response_model=MessageResponse)
async def update_password(body: UpdatePasswordRequest, identity: IdentityDep, session: SessionDep) -> MessageResponse:
    await auth_service.update_password(session, identity.id, body)
    return MessageResponse(message="Password updated successfully.")


@router.patch("/update-avatar", response_model=UserEnvelope)
async def update_avatar(
    identity: IdentityDep,
    session: SessionDep,
    settings: SettingsDep,
    store: ObjectStoreDep,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> UserEnvelope:
    """Replace the avatar; here the upload is the primary action and must succeed."""
    if avatar is None or not avatar.filename:
        raise BadRequest("No file uploaded.")
    stored = await avatar_service.store_avatar(store, settings, await read_image(avatar))
    user = await auth_service.update_avatar(session, identity.id, stored)
    return UserEnvelope(user=UserResponse.model_validate(user))
