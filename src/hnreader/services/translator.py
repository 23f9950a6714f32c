"""OpenAI-powered batch title translation with a per-style cache."""

import json
import logging

from openai import AsyncOpenAI

from hnreader.config import get_settings
from hnreader.domain.story import Story
from hnreader.domain.translation import (
    TranslationBatch,
    TranslationResult,
    TranslationStyle,
    style_instruction,
)
from hnreader.infrastructure.cache import JsonCache

logger = logging.getLogger(__name__)
settings = get_settings()


TRANSLATION_PROMPT = """Translate the following Hacker News titles from English to Chinese (Simplified).
Style Guide: {style_instruction}

Return a JSON object with a "translations" array where each entry has the original "id" and the "translatedTitle".

Input Data:
{items}"""


def title_cache_key(story_id: int, style: TranslationStyle) -> str:
    """Cache key for a translated title under one style."""
    return f"hn_title_{story_id}_{style}"


def parse_translations(text: str) -> list[TranslationResult]:
    """Decode and validate a translation payload.

    Accepts the structured {"translations": [...]} object as well as a bare
    array of {id, translatedTitle} entries.

    Raises:
        json.JSONDecodeError: If text is not JSON.
        pydantic.ValidationError: If the payload does not match the schema.
    """
    data = json.loads(text)
    if isinstance(data, list):
        data = {"translations": data}
    return TranslationBatch.model_validate(data).translations


class TranslationService:
    """Service for translating story titles in batches."""

    def __init__(
        self,
        cache: JsonCache,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the translator."""
        self.cache = cache
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.client = AsyncOpenAI(api_key=self.api_key)
        self.model = model or settings.translation_model

    async def translate(
        self,
        stories: list[Story],
        style: TranslationStyle,
        force_refresh: bool = False,
    ) -> list[TranslationResult]:
        """Translate story titles, serving cached titles where possible.

        Args:
            stories: Stories whose titles should be translated
            style: Translation style; part of every cache key
            force_refresh: Skip cache reads and translate every story

        Returns:
            Translations for cache hits plus whatever the remote batch
            returned. Stories missing from the remote response are absent.
        """
        results: list[TranslationResult] = []
        queued: list[dict] = []

        for story in stories:
            cached = None
            if not force_refresh:
                cached = await self.cache.get(title_cache_key(story.id, style))
            if isinstance(cached, str) and cached:
                results.append(TranslationResult(id=story.id, translated_title=cached))
            else:
                queued.append({"id": story.id, "title": story.title})

        if not queued:
            return results

        if not self.api_key:
            logger.warning("OpenAI API key not configured")
            return results

        prompt = TRANSLATION_PROMPT.format(
            style_instruction=style_instruction(style),
            items=json.dumps(queued, ensure_ascii=False),
        )

        try:
            response = await self.client.responses.parse(
                model=self.model,
                input=[{"role": "user", "content": prompt}],
                text_format=TranslationBatch,
            )
            translations = parse_translations(response.output_text)
        except Exception as e:
            logger.error(f"Translation error for {len(queued)} titles: {e}")
            return results

        requested = {item["id"] for item in queued}
        for translation in translations:
            if translation.id not in requested:
                logger.warning(f"Ignoring translation for unrequested id {translation.id}")
                continue
            await self.cache.set(
                title_cache_key(translation.id, style), translation.translated_title
            )
            results.append(translation)

        logger.info(f"Translated {len(results)}/{len(stories)} titles ({style})")
        return results
