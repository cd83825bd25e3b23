"""Church record service.

Creates, reads, overlays, and deletes church documents.  Nested
collections are stored in their wire shape (camelCase keys, ISO dates),
so a record read back returns every array exactly as it was submitted.
"""

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy import Row, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saintshub_api.core.errors import Conflict, NotFound, ValidationFailed, Violation
from saintshub_api.models.church import Church
from saintshub_api.schemas.church import ChurchCreate, ChurchUpdate

CHURCH_NOT_FOUND = "Church not found"

# Wire key -> model attribute for every document field
_FIELDS: dict[str, str] = {
    "name": "name",
    "location": "location",
    "principal": "principal",
    "image": "image",
    "logo": "logo",
    "banner": "banner",
    "securities": "securities",
    "oldServices": "old_services",
    "liveServices": "live_services",
    "gallery": "gallery",
    "songs": "songs",
}

_REQUIRED = ("name", "location", "principal", "image", "logo")
_COLLECTIONS = ("banner", "oldServices", "liveServices", "gallery", "songs")


def _date_services(services: list[dict[str, Any]] | None) -> None:
    if not services:
        return
    now = datetime.now(UTC).isoformat()
    for service in services:
        if not service.get("date"):
            service["date"] = now


def _to_document(contract: ChurchCreate) -> dict[str, Any]:
    """Dump a validated contract into its stored shape, dating undated services."""
    document = contract.model_dump(mode="json", by_alias=True, exclude_none=True)
    for key in ("oldServices", "liveServices"):
        _date_services(document[key])
    return document


def _document_of(church: Church) -> dict[str, Any]:
    return {key: getattr(church, attr) for key, attr in _FIELDS.items()}


def _apply(church: Church, document: dict[str, Any]) -> None:
    for key, attr in _FIELDS.items():
        setattr(church, attr, document[key])


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict from exc


async def create_church(session: AsyncSession, owner_id: uuid.UUID, contract: ChurchCreate) -> Church:
    """Store a new church owned by ``owner_id``.

    Args:
        session: The database session.
        owner_id: Id of the authenticated identity creating the record.
        contract: Validated church data.

    Returns:
        The created Church.
    """
    church = Church(user_id=owner_id)
    _apply(church, _to_document(contract))
    session.add(church)
    await _commit(session)
    await session.refresh(church)
    logger.info("Created church {} ({})", church.name, church.id)
    return church


async def get_church(session: AsyncSession, church_id: uuid.UUID, *, with_owner: bool = False) -> Church:
    """Load a church by id, optionally with its owner.

    Raises:
        NotFound: If the church does not exist.
    """
    query = select(Church).where(Church.id == church_id)
    if with_owner:
        query = query.options(selectinload(Church.owner))
    result = await session.execute(query)
    church = result.scalar_one_or_none()
    if church is None:
        raise NotFound(CHURCH_NOT_FOUND)
    return church


async def list_churches(session: AsyncSession) -> list[Church]:
    result = await session.execute(select(Church).order_by(Church.created_at))
    return list(result.scalars().all())


async def list_public_churches(session: AsyncSession) -> Sequence[Row[tuple[uuid.UUID, str]]]:
    """Public directory: only ``id`` and ``name`` leave the database."""
    result = await session.execute(select(Church.id, Church.name).order_by(Church.name))
    return result.all()


def _overlay_violations(changes: dict[str, Any]) -> list[Violation]:
    """Supplied fields may not be cleared with ``null``."""
    return [Violation(path=key, message=f"{key} cannot be null") for key, value in changes.items() if value is None]


def _structure_violations(document: dict[str, Any]) -> list[Violation]:
    """Record-level shape: required scalars present, collections are lists.

    Collections may be empty; element removal is allowed to drain them.
    """
    violations = [Violation(path=key, message=f"{key} is required") for key in _REQUIRED if not document.get(key)]
    violations.extend(
        Violation(path=key, message=f"{key} must be a list")
        for key in _COLLECTIONS
        if not isinstance(document.get(key), list)
    )
    securities = document.get("securities")
    if not isinstance(securities, dict):
        violations.append(Violation(path="securities", message="securities is required"))
    else:
        violations.extend(
            Violation(path=f"securities.{key}", message=f"securities.{key} must be a list")
            for key in ("deacons", "trustees")
            if not isinstance(securities.get(key), list)
        )
    return violations


async def update_church(session: AsyncSession, church_id: uuid.UUID, overlay: ChurchUpdate) -> Church:
    """Overlay the supplied fields onto a stored church.

    Each supplied field replaces the stored one wholesale and is checked
    against its own format rules by ``ChurchUpdate``.  Fields the client
    did not send are not re-validated, so collections emptied by element
    removal stay empty until a request replaces them.

    Raises:
        NotFound: If the church does not exist.
        ValidationFailed: If a supplied field is null or the merged record
            lost a required field.
    """
    church = await get_church(session, church_id)
    changes = overlay.model_dump(mode="json", by_alias=True, exclude_unset=True)
    for key in ("oldServices", "liveServices"):
        _date_services(changes.get(key))

    merged = _document_of(church)
    merged.update(changes)
    violations = _overlay_violations(changes) or _structure_violations(merged)
    if violations:
        await session.rollback()
        raise ValidationFailed(violations)

    _apply(church, merged)
    await _commit(session)
    await session.refresh(church)
    logger.info("Updated church {} ({})", church_id, ", ".join(changes) or "no fields")
    return church


async def delete_church(session: AsyncSession, church_id: uuid.UUID) -> None:
    """Delete a church.

    Raises:
        NotFound: If the church does not exist.
    """
    church = await get_church(session, church_id)
    await session.delete(church)
    await session.commit()
    logger.info("Deleted church {}", church_id)
