"""User model: registered identities, their role, and the admin elevation flag."""

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from saintshub_api.models.base import Base, JSONDocument, TimestampMixin, UUIDMixin

ROLE_STANDARD = "standard"
ROLE_PASTOR = "pastor"
ROLE_IT = "IT"
ROLES: tuple[str, ...] = (ROLE_STANDARD, ROLE_PASTOR, ROLE_IT)

# Roles that must name a church at signup and wait for admin approval
LEADERSHIP_ROLES: frozenset[str] = frozenset({ROLE_PASTOR, ROLE_IT})

LANGUAGES: tuple[str, ...] = ("en", "fr")


class User(Base, UUIDMixin, TimestampMixin):
    """A registered identity.

    Attributes:
        email: Unique, stored lower-cased.
        hashed_password: bcrypt hash; never serialized.
        role: One of ``standard``, ``pastor``, ``IT``.
        is_admin: Elevation flag, flipped only by the approval workflow.
        avatar: Optional ``{"storage_id": ..., "url": ...}`` descriptor.
        church_selection: Free-text church affiliation chosen at signup.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('standard', 'pastor', 'IT')", name="ck_users_role"),
        CheckConstraint("language IN ('en', 'fr')", name="ck_users_language"),
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    language: Mapped[str] = mapped_column(String(2), nullable=False, default="en", server_default="en")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_STANDARD, server_default=ROLE_STANDARD)
    church_selection: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    avatar: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
