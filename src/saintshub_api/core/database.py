"""Async engine and per-request session handling for the church directory store.

PostgreSQL (asyncpg) in deployment, aiosqlite for tests and local runs.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the active engine.

    Raises:
        RuntimeError: If ``init_engine`` has not run yet.
    """
    if _session_factory is None:
        msg = "Session factory not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


def init_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create the process-wide async engine and its session factory.

    In-memory SQLite gets a ``StaticPool`` so every session sees the same
    database; server databases get a bounded connection pool.

    Args:
        database_url: Async SQLAlchemy connection string.
        **kwargs: Extra keyword arguments for ``create_async_engine``.

    Returns:
        The created engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url:
            kwargs.setdefault("poolclass", StaticPool)
    else:
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 5)
        kwargs.setdefault("pool_pre_ping", True)
    _engine = create_async_engine(database_url, **kwargs)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession]:
    """Open a standalone session outside a request (CLI commands)."""
    factory = get_session_factory()
    async with factory() as session:
        yield session
