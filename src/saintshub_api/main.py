"""FastAPI application factory.

Creates the FastAPI app with lifespan management, the central error
translator, middleware, and the v1 routers.  Settings and the outbound
collaborators (mailer, object store) are built once here and kept on
``app.state`` for the dependencies to hand out.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from saintshub_api import __version__
from saintshub_api.core.config import Settings, load_settings
from saintshub_api.core.database import dispose_engine, init_engine
from saintshub_api.core.logging import setup_logging
from saintshub_api.lib.mailer import Mailer
from saintshub_api.lib.storage import ObjectStore, S3ObjectStore


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: init engine on startup, dispose on shutdown."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_dir, json_logs=settings.log_json)
    init_engine(settings.database_url, echo=False)
    logger.info("Saintshub API {} starting ({})", __version__, settings.environment)

    yield

    await dispose_engine()


def create_app(
    settings: Settings | None = None,
    mailer: Mailer | None = None,
    object_store: ObjectStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        mailer: Mailer override (tests pass a fake).
        object_store: Object store override; built from settings when
            omitted and storage is enabled.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or load_settings()
    if mailer is None:
        mailer = Mailer.from_settings(settings)
    if object_store is None and settings.storage_enabled:
        object_store = S3ObjectStore.from_settings(settings)

    app = FastAPI(
        title="Saintshub API",
        description="Church directory: accounts, admin approval, and church dashboards",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.mailer = mailer
    app.state.object_store = object_store

    from saintshub_api.api.errors import register_exception_handlers
    from saintshub_api.api.router import create_router, setup_middleware

    register_exception_handlers(app)
    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
