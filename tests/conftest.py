"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from hnreader.infrastructure.cache import JsonCache
from hnreader.infrastructure.kv_store import MemoryKeyValueStore
from hnreader.infrastructure.models import Base


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def cache(memory_store: MemoryKeyValueStore) -> JsonCache:
    """JSON cache over the in-memory store."""
    return JsonCache(memory_store)


@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a SQLite cache database in a temp directory."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)
