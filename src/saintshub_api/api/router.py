"""Root API router with the v1 prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from saintshub_api.api.middleware import (
    AccessLogMiddleware,
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    setup_cors,
)
from saintshub_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from saintshub_api.api.v1.admin import router as admin_router
    from saintshub_api.api.v1.auth import router as auth_router
    from saintshub_api.api.v1.churches import router as churches_router
    from saintshub_api.api.v1.health import router as health_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(health_router)
    root_router.include_router(auth_router)
    root_router.include_router(churches_router)
    root_router.include_router(admin_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Starlette runs the last-added middleware first, so the access log sees
    every response, including 429 and 413 rejections.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_json_body_bytes)
    app.add_middleware(
        RateLimitMiddleware,
        requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        trusted_proxy_headers=settings.trusted_proxy_header_list,
    )
    app.add_middleware(AccessLogMiddleware)
