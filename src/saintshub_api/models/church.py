"""Church model: a dashboard document with nested collections.

Nested collections (securities, services, gallery, banner, songs) are
stored as JSON arrays so element order is exactly what the client sent.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from saintshub_api.models.base import Base, JSONDocument, UUIDMixin, utcnow

if TYPE_CHECKING:
    from saintshub_api.models.user import User


class Church(Base, UUIDMixin):
    """A church record owned by the identity that created it.

    Attributes:
        principal: ``{"pastor", "wife", "image", "description"}``.
        securities: ``{"deacons": [...], "trustees": [...]}``.
        old_services: Past services, each ``{"title", "preacher", "sermon", "date"}``.
        live_services: Live services, same shape as ``old_services``.
        gallery: Ordered image URLs.
        banner: Ordered banner image URLs.
        songs: Ordered ``{"title", "songUrl"}`` entries.
    """

    __tablename__ = "churches"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    image: Mapped[str] = mapped_column(String(1000), nullable=False)
    logo: Mapped[str] = mapped_column(String(1000), nullable=False)
    principal: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    securities: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    old_services: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    live_services: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    gallery: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    banner: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    songs: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    owner: Mapped["User"] = relationship(lazy="noload")
