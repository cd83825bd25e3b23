"""Removal of a single element from a church's nested collections.

Each removable collection is a member of ``NestedCollection`` with an
accessor pair that reads the list and writes a replacement back to the
record.  Nothing is looked up by a runtime field name.

Removal is positional and not idempotent: repeating a request with the
same index removes whatever element has since shifted into that slot, or
fails with ``InvalidIndex`` once the list is too short.
"""

import copy
import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from saintshub_api.core.errors import InvalidFieldType, InvalidIndex, NotFound
from saintshub_api.models.church import Church

CHURCH_NOT_FOUND = "Church not found"


class NestedCollection(enum.StrEnum):
    """Collections that support element removal."""

    GALLERY = "gallery"
    BANNER = "banner"
    SONGS = "songs"
    OLD_SERVICES = "oldServices"
    LIVE_SERVICES = "liveServices"
    DEACONS = "securities.deacons"
    TRUSTEES = "securities.trustees"


class CollectionSegment(enum.StrEnum):
    """URL segments accepted by the removal route."""

    GALLERY = "gallery"
    BANNER = "banner"
    SONG = "song"
    PAST_SERVICE = "past-service"
    LIVE = "live"
    DEACON = "deacon"
    TRUSTEE = "trustee"


SEGMENT_COLLECTIONS: dict[CollectionSegment, NestedCollection] = {
    CollectionSegment.GALLERY: NestedCollection.GALLERY,
    CollectionSegment.BANNER: NestedCollection.BANNER,
    CollectionSegment.SONG: NestedCollection.SONGS,
    CollectionSegment.PAST_SERVICE: NestedCollection.OLD_SERVICES,
    CollectionSegment.LIVE: NestedCollection.LIVE_SERVICES,
    CollectionSegment.DEACON: NestedCollection.DEACONS,
    CollectionSegment.TRUSTEE: NestedCollection.TRUSTEES,
}


@dataclass(frozen=True)
class Accessor:
    """Reads a collection from a church and writes a replacement back."""

    label: str
    read: Callable[[Church], Any]
    write: Callable[[Church, list[Any]], None]


def _root(attr: str, label: str) -> Accessor:
    def write(church: Church, items: list[Any]) -> None:
        setattr(church, attr, items)

    return Accessor(label=label, read=lambda church: getattr(church, attr), write=write)


def _securities(key: str, label: str) -> Accessor:
    def read(church: Church) -> Any:
        securities = church.securities
        if not isinstance(securities, dict):
            return None
        return securities.get(key)

    def write(church: Church, items: list[Any]) -> None:
        # A new dict so the JSON column registers the change
        securities = copy.deepcopy(church.securities)
        securities[key] = items
        church.securities = securities

    return Accessor(label=label, read=read, write=write)


ACCESSORS: dict[NestedCollection, Accessor] = {
    NestedCollection.GALLERY: _root("gallery", "Gallery image"),
    NestedCollection.BANNER: _root("banner", "Banner image"),
    NestedCollection.SONGS: _root("songs", "Song"),
    NestedCollection.OLD_SERVICES: _root("old_services", "Past service"),
    NestedCollection.LIVE_SERVICES: _root("live_services", "Live service"),
    NestedCollection.DEACONS: _securities("deacons", "Deacon"),
    NestedCollection.TRUSTEES: _securities("trustees", "Trustee"),
}


def parse_index(raw: str, label: str = "item") -> int:
    """Parse a zero-based position.

    Raises:
        InvalidIndex: If ``raw`` is not a non-negative integer.
    """
    if not raw.isdecimal():
        raise InvalidIndex(f"Invalid {label.lower()} index.")
    return int(raw)


async def remove_nested_item(
    session: AsyncSession,
    church_id: uuid.UUID,
    collection: NestedCollection,
    index: str,
) -> Church:
    """Remove the element at ``index`` from one of a church's collections.

    Preconditions are checked in order, and nothing is written unless all
    of them hold.

    Args:
        session: The database session.
        church_id: The church to modify.
        collection: Which collection to remove from.
        index: Zero-based position, as received in the URL.

    Returns:
        The updated Church.

    Raises:
        InvalidIndex: If the index is not a non-negative integer or is out of range.
        NotFound: If the church does not exist.
        InvalidFieldType: If the collection is missing or not a list on this record.
    """
    accessor = ACCESSORS[collection]
    position = parse_index(index, accessor.label)

    church = await session.get(Church, church_id)
    if church is None:
        raise NotFound(CHURCH_NOT_FOUND)

    items = accessor.read(church)
    if not isinstance(items, list):
        raise InvalidFieldType(f"{accessor.label} data not found or invalid.")

    if position >= len(items):
        raise InvalidIndex(f"Invalid {accessor.label.lower()} index.")

    accessor.write(church, items[:position] + items[position + 1 :])
    await session.commit()
    logger.info("Removed {}[{}] from church {}", collection.value, position, church_id)
    return church
