"""Reader preferences endpoints."""

from fastapi import APIRouter

from hnreader.api.dependencies import ReaderDep
from hnreader.domain.preferences import ReaderPreferences

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=ReaderPreferences)
async def get_preferences(reader: ReaderDep) -> ReaderPreferences:
    """Get the current reader preferences."""
    return reader.preferences


@router.put("", response_model=ReaderPreferences)
async def update_preferences(
    preferences: ReaderPreferences,
    reader: ReaderDep,
) -> ReaderPreferences:
    """Replace the reader preferences.

    Changing the translation style retranslates every loaded story.
    """
    return await reader.update_preferences(preferences)
