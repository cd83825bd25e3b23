"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from saintshub_api.models.church import Church
from saintshub_api.models.user import User

__all__ = [
    "Church",
    "User",
]
