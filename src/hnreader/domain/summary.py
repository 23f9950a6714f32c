"""Article summary domain types."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hnreader.domain.translation import TranslationStyle

MAX_KEY_POINTS = 5


class SummaryModel(StrEnum):
    """Model tier used for article summaries."""

    FAST = "fast"
    ADVANCED = "advanced"


class ArticleSummary(BaseModel):
    """Represents an AI-generated article summary."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tldr: str = Field(min_length=1)
    key_points: list[str] = Field(alias="keyPoints")
    analysis: str = Field(min_length=1)

    @field_validator("key_points")
    @classmethod
    def limit_key_points(cls, v: list[str]) -> list[str]:
        """Keep at most MAX_KEY_POINTS points."""
        return v[:MAX_KEY_POINTS]


class GeneratedSummary(BaseModel):
    """A summary together with the model tier and style that produced it."""

    model_config = ConfigDict(frozen=True)

    summary: ArticleSummary
    model: SummaryModel
    style: TranslationStyle
