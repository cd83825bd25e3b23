"""FastAPI dependency injection for sessions, settings, collaborators, and access control.

``get_current_identity`` authenticates the bearer token and re-resolves its
subject; ``require_admin`` re-reads the identity row to check the admin flag.
Token contents are never trusted for privileges.
"""

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saintshub_api.core.config import Settings
from saintshub_api.core.database import get_session_factory
from saintshub_api.core.errors import (
    ExpiredCredential,
    InsufficientPrivilege,
    InvalidCredential,
    SubjectNotFound,
    Unauthenticated,
    UnknownSubject,
)
from saintshub_api.core.security import decode_token
from saintshub_api.models.user import User

if TYPE_CHECKING:
    from saintshub_api.lib.mailer import Mailer
    from saintshub_api.lib.storage import ObjectStore

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentIdentity:
    """Request-scoped projection of the authenticated identity."""

    id: uuid.UUID
    email: str


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


def get_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_mailer(request: Request) -> "Mailer":
    return request.app.state.mailer


def get_object_store(request: Request) -> "ObjectStore | None":
    return request.app.state.object_store


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CurrentIdentity:
    """Resolve the bearer token to an existing identity.

    Args:
        credentials: Parsed ``Authorization: Bearer`` header, if any.
        session: The database session.
        settings: Application settings.

    Returns:
        The authenticated identity's id and email.

    Raises:
        Unauthenticated: No bearer token was sent.
        ExpiredCredential: The token has expired.
        InvalidCredential: The token is malformed or its signature is wrong.
        UnknownSubject: The token's identity no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated

    try:
        payload = decode_token(credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm)
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredCredential from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidCredential from exc

    try:
        subject = uuid.UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise InvalidCredential from exc

    result = await session.execute(select(User.id, User.email).where(User.id == subject))
    row = result.one_or_none()
    if row is None:
        raise UnknownSubject
    return CurrentIdentity(id=row.id, email=row.email)


async def require_admin(
    identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> User:
    """Allow the request only if the identity is currently an administrator.

    The identity row is re-read on every call so an approval takes effect
    for tokens issued before it.

    Raises:
        SubjectNotFound: The identity disappeared after authentication.
        InsufficientPrivilege: The identity is not an administrator.
    """
    result = await session.execute(
        select(User).where(User.id == identity.id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise SubjectNotFound
    if not user.is_admin:
        raise InsufficientPrivilege
    return user


SessionDep = Annotated[AsyncSession, Depends(get_async_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
IdentityDep = Annotated[CurrentIdentity, Depends(get_current_identity)]
AdminDep = Annotated[User, Depends(require_admin)]
