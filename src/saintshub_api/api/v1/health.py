"""Liveness and build information (no authentication required).

GET /, GET /health, GET /info.
"""

from fastapi import APIRouter

from saintshub_api import __version__
from saintshub_api.core.dependencies import SettingsDep

router = APIRouter(tags=["health"])


@router.get("/", status_code=200)
@router.get("/health", status_code=200)
async def health_check() -> dict:
    return {"status": "success", "message": "Saintshub API is running"}


@router.get("/info", status_code=200)
async def info(settings: SettingsDep) -> dict:
    """Return application version and environment."""
    return {
        "status": "success",
        "version": __version__,
        "environment": settings.environment,
    }
