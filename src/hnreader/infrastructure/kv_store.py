"""Persistent string key-value stores backing the cache."""

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hnreader.infrastructure.models import CacheEntryModel


class StoreError(Exception):
    """A store read or write could not be completed."""


class QuotaExceededError(StoreError):
    """A value is larger than the store accepts."""


class KeyValueStore(Protocol):
    """String-keyed store of string values."""

    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...


def _check_quota(key: str, value: str, max_value_bytes: int) -> None:
    if max_value_bytes and len(value.encode("utf-8")) > max_value_bytes:
        raise QuotaExceededError(
            f"Value for {key} exceeds {max_value_bytes} bytes"
        )


class MemoryKeyValueStore:
    """Dictionary-backed store for tests and ephemeral runs."""

    def __init__(self, max_value_bytes: int = 0) -> None:
        self.max_value_bytes = max_value_bytes
        self.data: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        _check_quota(key, value, self.max_value_bytes)
        self.data[key] = value


class SqlKeyValueStore:
    """Store backed by the cache_entries table.

    Each call runs in its own short session so concurrent callers never
    share an AsyncSession.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_value_bytes: int = 0,
    ) -> None:
        self.session_factory = session_factory
        self.max_value_bytes = max_value_bytes

    async def get_item(self, key: str) -> str | None:
        try:
            async with self.session_factory() as session:
                entry = await session.get(CacheEntryModel, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {key}: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        _check_quota(key, value, self.max_value_bytes)
        try:
            async with self.session_factory() as session:
                await session.merge(CacheEntryModel(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write {key}: {e}") from e
