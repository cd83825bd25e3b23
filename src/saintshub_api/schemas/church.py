"""Church request and response schemas.

``ChurchCreate`` is the full contract a new record must satisfy.
``ChurchUpdate`` reuses the same per-field types with every field optional,
so format constraints (URLs, non-empty arrays, non-empty strings) still
apply to whatever a partial update supplies.  Fields an update leaves out
are not re-checked.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, AliasChoices, AnyUrl, Field, TypeAdapter, ValidationError

from saintshub_api.schemas.common import CamelModel

_url_adapter = TypeAdapter(AnyUrl)


def _url(message: str) -> AfterValidator:
    """Require an absolute URL while keeping the original string."""

    def check(value: str) -> str:
        try:
            _url_adapter.validate_python(value)
        except ValidationError as exc:
            raise ValueError(message) from exc
        return value

    return AfterValidator(check)


def _not_blank(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not value.strip():
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _non_empty(message: str) -> AfterValidator:
    def check(value: list) -> list:
        if not value:
            raise ValueError(message)
        return value

    return AfterValidator(check)


class Principal(CamelModel):
    pastor: Annotated[str, _not_blank("Pastor name required")]
    wife: str | None = None
    image: Annotated[str, _url("Invalid URL for principal image")] | None = None
    description: str | None = None


class Deacon(CamelModel):
    names: Annotated[str, _not_blank("Deacon name required")]
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "descriptions"))
    image: Annotated[str, _url("Invalid URL for deacon image")] | None = None


class Trustee(CamelModel):
    names: Annotated[str, _not_blank("Trustee name required")]
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "descriptions"))
    image: Annotated[str, _url("Invalid URL for trustee image")] | None = None


class Securities(CamelModel):
    deacons: Annotated[list[Deacon], _non_empty("At least one deacon is required")]
    trustees: Annotated[list[Trustee], _non_empty("At least one trustee is required")]


class SecuritiesView(CamelModel):
    """Stored securities block; lists may have been emptied by element removal."""

    deacons: list[Deacon] = Field(default_factory=list)
    trustees: list[Trustee] = Field(default_factory=list)


class Service(CamelModel):
    """A past or live service; ``date`` defaults to the time it is stored."""

    title: Annotated[str, _not_blank("Service title required")]
    preacher: str | None = None
    sermon: str | None = None
    date: datetime | None = None


class Song(CamelModel):
    title: Annotated[str, _not_blank("Song title required")]
    song_url: Annotated[str, _url("Invalid URL for song")]


Name = Annotated[str, _not_blank("Church name is required")]
Location = Annotated[str, _not_blank("Location is required")]
ImageUrl = Annotated[str, _url("Valid church image URL is required")]
LogoUrl = Annotated[str, _url("Valid logo URL is required")]
Banner = Annotated[
    list[Annotated[str, _url("Each banner item must be a valid URL")]],
    _non_empty("At least one banner image URL is required"),
]
Gallery = Annotated[
    list[Annotated[str, _url("Each gallery item must be a valid URL")]],
    _non_empty("At least one gallery image URL is required"),
]
OldServices = Annotated[list[Service], _non_empty("At least one past service record is required")]
LiveServices = Annotated[list[Service], _non_empty("At least one live service record is required")]
Songs = Annotated[list[Song], _non_empty("At least one song is required")]


class ChurchCreate(CamelModel):
    """Full church contract for a new record."""

    name: Name
    location: Location
    principal: Principal
    image: ImageUrl
    logo: LogoUrl
    banner: Banner
    securities: Securities
    old_services: OldServices
    live_services: LiveServices
    gallery: Gallery
    songs: Songs


class ChurchUpdate(CamelModel):
    """Partial overlay: each supplied field replaces the stored one wholesale."""

    name: Name | None = None
    location: Location | None = None
    principal: Principal | None = None
    image: ImageUrl | None = None
    logo: LogoUrl | None = None
    banner: Banner | None = None
    securities: Securities | None = None
    old_services: OldServices | None = None
    live_services: LiveServices | None = None
    gallery: Gallery | None = None
    songs: Songs | None = None


class OwnerSummary(CamelModel):
    """The identity that created a church, without credentials."""

    id: UUID
    first_name: str
    last_name: str
    email: str


class ChurchResponse(CamelModel):
    """Full church record."""

    id: UUID
    name: str
    location: str
    image: str
    logo: str
    principal: Principal
    securities: SecuritiesView
    old_services: list[Service]
    live_services: list[Service]
    gallery: list[str]
    banner: list[str]
    songs: list[Song]
    user_id: UUID = Field(validation_alias=AliasChoices("user", "user_id"), serialization_alias="user")
    created_at: datetime


class ChurchDetailResponse(ChurchResponse):
    """Church record with its owner populated."""

    owner: OwnerSummary | None = None


class PublicChurchResponse(CamelModel):
    """Restricted projection for the public directory."""

    id: UUID
    name: str
