"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from hnreader.domain.story import TranslationState
from hnreader.domain.summary import SummaryModel
from hnreader.domain.translation import TranslationStyle


class StoryResponse(BaseModel):
    """Response schema for a story."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str | None
    author: str
    score: int
    comment_count: int | None
    child_ids: list[int] | None
    kind: str
    created_at: datetime
    translated_title: str | None = None
    translation_state: TranslationState | None = None


class StoryListResponse(BaseModel):
    """Response schema for the loaded story list."""

    stories: list[StoryResponse]
    total_ids: int
    loaded_count: int
    has_more: bool
    translation_style: TranslationStyle


class SummaryResponse(BaseModel):
    """Response schema for an article summary."""

    story_id: int
    tldr: str
    key_points: list[str]
    analysis: str
    model: SummaryModel
    style: TranslationStyle
