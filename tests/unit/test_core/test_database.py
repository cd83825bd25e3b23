"""Unit tests for engine and session factory handling."""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from saintshub_api.core import database
from saintshub_api.core.database import dispose_engine, get_session_factory, init_engine, session_scope


class TestEngineLifecycle:
    async def test_factory_requires_init(self) -> None:
        await dispose_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session_factory()

    async def test_memory_sqlite_uses_static_pool(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert isinstance(engine.pool, StaticPool)
            async with session_scope() as session:
                result = await session.execute(text("SELECT 1"))
                assert result.scalar_one() == 1
        finally:
            await dispose_engine()
        assert database._engine is None
