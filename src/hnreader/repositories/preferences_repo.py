"""Repository for persisted reader preferences."""

import logging

from pydantic import ValidationError

from hnreader.domain.preferences import ReaderPreferences
from hnreader.infrastructure.cache import JsonCache

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "hn_app_settings"


class PreferencesRepository:
    """Loads and saves the single ReaderPreferences record."""

    def __init__(self, cache: JsonCache) -> None:
        """Initialize repository with the shared cache."""
        self.cache = cache

    async def load(self) -> ReaderPreferences:
        """Return saved preferences, or defaults when none are usable."""
        data = await self.cache.get(PREFERENCES_KEY)
        if data is None:
            return ReaderPreferences()
        try:
            return ReaderPreferences.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid saved preferences: {e}")
            return ReaderPreferences()

    async def save(self, preferences: ReaderPreferences) -> bool:
        """Persist the whole record."""
        return await self.cache.set(PREFERENCES_KEY, preferences.model_dump(mode="json"))
