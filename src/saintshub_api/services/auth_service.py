"""Identity management service.

Handles registration, login, profile and password changes, avatar
updates, and the admin approval workflow.  Every failure is raised as an
``AppError``; routes never build error responses themselves.
"""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from saintshub_api.core.config import Settings
from saintshub_api.core.errors import AuthenticationFailed, BadRequest, Conflict, NotFound
from saintshub_api.core.security import create_access_token, hash_password, password_needs_rehash, verify_password
from saintshub_api.lib.storage import StoredObject
from saintshub_api.models.user import LEADERSHIP_ROLES, User
from saintshub_api.schemas.auth import SignupRequest, UpdateMeRequest, UpdatePasswordRequest

EMAIL_IN_USE = "Email address already in use."
USER_NOT_FOUND = "No user found with that ID"


async def _commit(session: AsyncSession) -> None:
    """Commit, turning a uniqueness violation into ``Conflict``."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict(EMAIL_IN_USE) from exc


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def ensure_email_available(session: AsyncSession, email: str) -> None:
    """Raise ``Conflict`` if the email is already registered."""
    if await get_user_by_email(session, email) is not None:
        raise Conflict(EMAIL_IN_USE)


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    """Load a user by id.

    Raises:
        NotFound: If no user has that id.
    """
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user


async def create_user(
    session: AsyncSession,
    request: SignupRequest,
    avatar: StoredObject | None = None,
    *,
    is_admin: bool = False,
) -> User:
    """Register a new identity.

    Args:
        session: The database session.
        request: Validated signup data.
        avatar: Uploaded avatar, if one was sent and stored.
        is_admin: Create the identity already elevated (operator CLI only).

    Returns:
        The created User.

    Raises:
        Conflict: If the email is already registered.
    """
    await ensure_email_available(session, request.email)

    user = User(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        hashed_password=hash_password(request.password),
        language=request.language,
        role=request.role,
        church_selection=request.church_selection.strip() if request.church_selection else None,
        is_admin=is_admin,
        avatar=avatar.to_dict() if avatar else None,
    )
    session.add(user)
    await _commit(session)
    await session.refresh(user)
    logger.info("Registered user {} (role {})", user.email, user.role)
    return user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    """Check an email/password pair.

    Raises:
        AuthenticationFailed: Unknown email or wrong password (indistinguishable).
    """
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthenticationFailed
    if password_needs_rehash(user.hashed_password):
        user.hashed_password = hash_password(password)
        await session.commit()
        logger.info("Upgraded password hash for {}", user.email)
    return user


def issue_token(user: User, settings: Settings) -> str:
    """Sign an access token for the user; the token carries only the user id."""
    return create_access_token(
        subject=user.id,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_access_token_expire_minutes,
    )


def profile_changes(request: UpdateMeRequest) -> dict[str, Any]:
    """Return the supplied profile fields.

    Raises:
        BadRequest: If the request names no updatable field.
    """
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise BadRequest("No valid fields provided for update.")
    return changes


async def update_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    changes: dict[str, Any],
    avatar: StoredObject | None = None,
) -> User:
    """Apply profile changes (and optionally a new avatar) to a user."""
    user = await get_user(session, user_id)
    email = changes.get("email")
    if email is not None and email != user.email:
        await ensure_email_available(session, email)

    for field, value in changes.items():
        setattr(user, field, value)
    if avatar is not None:
        user.avatar = avatar.to_dict()
    await _commit(session)
    await session.refresh(user)
    return user


async def update_password(session: AsyncSession, user_id: uuid.UUID, request: UpdatePasswordRequest) -> None:
    """Change a user's password after checking the current one.

    Raises:
        BadRequest: If the new password and its confirmation differ.
        AuthenticationFailed: If the current password is wrong.
    """
    if request.new_password != request.confirm_password:
        raise BadRequest("New passwords don't match")

    user = await get_user(session, user_id)
    if not verify_password(request.current_password, user.hashed_password):
        raise AuthenticationFailed("Your current password is wrong")

    user.hashed_password = hash_password(request.new_password)
    await session.commit()
    logger.info("Password changed for {}", user.email)


async def update_avatar(session: AsyncSession, user_id: uuid.UUID, avatar: StoredObject) -> User:
    user = await get_user(session, user_id)
    user.avatar = avatar.to_dict()
    await session.commit()
    await session.refresh(user)
    return user


async def list_pending_users(session: AsyncSession) -> list[User]:
    """Pastors and IT members still waiting for admin approval."""
    result = await session.execute(
        select(User)
        .where(User.role.in_(sorted(LEADERSHIP_ROLES)), User.is_admin.is_(False))
        .order_by(User.created_at)
    )
    return list(result.scalars().all())


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def approve_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    """Grant administrator access.

    Raises:
        NotFound: If no user has that id.
    """
    user = await get_user(session, user_id)
    user.is_admin = True
    await session.commit()
    await session.refresh(user)
    logger.info("Approved {} as admin", user.email)
    return user
