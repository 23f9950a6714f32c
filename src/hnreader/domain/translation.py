"""Translation domain types."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TranslationStyle(StrEnum):
    """Tone/register used when translating titles."""

    TECH = "tech"
    CONCISE = "concise"
    PROFESSIONAL = "professional"
    FUN = "fun"


STYLE_INSTRUCTIONS: dict[TranslationStyle, str] = {
    TranslationStyle.TECH: (
        "Keep technical terms in English (e.g., LLM, Rust, CI/CD). "
        "Use standard terminology used by Chinese developers."
    ),
    TranslationStyle.CONCISE: (
        "Translate strictly and concisely. Remove unnecessary words. Keep it short."
    ),
    TranslationStyle.PROFESSIONAL: (
        "Use formal, professional Chinese (Business/Academic tone)."
    ),
    TranslationStyle.FUN: (
        "Translate in a witty, engaging, slightly clickbaity style "
        "suitable for social media."
    ),
}


def style_instruction(style: TranslationStyle) -> str:
    """Prompt instruction for a translation style."""
    return STYLE_INSTRUCTIONS.get(style, STYLE_INSTRUCTIONS[TranslationStyle.TECH])


class TranslationResult(BaseModel):
    """A translated title for one story."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    translated_title: str = Field(alias="translatedTitle")


class TranslationBatch(BaseModel):
    """Structured output for a batch title translation."""

    translations: list[TranslationResult] = Field(
        description="One entry per input story, keyed by the original id"
    )
