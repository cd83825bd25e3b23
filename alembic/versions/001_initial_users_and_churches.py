"""Initial migration: users and churches tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("language", sa.String(2), nullable=False, server_default="en"),
        sa.Column("role", sa.String(20), nullable=False, server_default="standard"),
        sa.Column("church_selection", sa.String(200), nullable=True),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("avatar", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('standard', 'pastor', 'IT')", name="ck_users_role"),
        sa.CheckConstraint("language IN ('en', 'fr')", name="ck_users_language"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "churches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("location", sa.String(300), nullable=False),
        sa.Column("image", sa.String(1000), nullable=False),
        sa.Column("logo", sa.String(1000), nullable=False),
        sa.Column("principal", JSONB, nullable=False),
        sa.Column("securities", JSONB, nullable=False),
        sa.Column("old_services", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("live_services", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("gallery", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("banner", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("songs", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column(
            "user_id",
            UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_churches_name", "churches", ["name"])
    op.create_index("ix_churches_user_id", "churches", ["user_id"])


def downgrade() -> None:
    op.drop_table("churches")
    op.drop_table("users")
