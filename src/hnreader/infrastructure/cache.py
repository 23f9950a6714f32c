"""Best-effort JSON cache over a key-value store."""

import json
import logging
from typing import Any

from hnreader.infrastructure.kv_store import KeyValueStore, StoreError

logger = logging.getLogger(__name__)


class JsonCache:
    """JSON-encoding cache that never raises.

    The cache only accelerates lookups: failed reads behave as misses and
    failed writes are dropped. Entries never expire; a stale value is only
    bypassed by changing the key.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def get(self, key: str) -> Any | None:
        """Return the decoded value for key, or None."""
        try:
            raw = await self.store.get_item(key)
        except StoreError as e:
            logger.warning(f"Cache read error for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Cache entry {key} is not valid JSON: {e}")
            return None

    async def set(self, key: str, value: Any) -> bool:
        """Store value under key. Returns False when the write was dropped."""
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cache write error for {key}: {e}")
            return False

        try:
            await self.store.set_item(key, raw)
        except StoreError as e:
            logger.warning(f"Cache write error for {key}: {e}")
            return False
        return True
