"""OpenAI-powered article summarization with web search grounding."""

import hashlib
import json
import logging
import re

from openai import AsyncOpenAI
from pydantic import ValidationError

from hnreader.config import get_settings
from hnreader.domain.summary import ArticleSummary, SummaryModel
from hnreader.domain.translation import TranslationStyle, style_instruction
from hnreader.infrastructure.cache import JsonCache

logger = logging.getLogger(__name__)
settings = get_settings()

# Bump when the cached ArticleSummary layout changes
SUMMARY_SCHEMA_VERSION = "v2"

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")

# Structured output cannot be combined with the web search tool, so the
# model is asked for raw JSON and the text is parsed here.
SUMMARIZATION_PROMPT = """Analyze the following article from the link provided:
Title: {title}
URL: {url}

Provide a structured summary in Chinese (Simplified).
Style: {style_instruction}

If you cannot access the content directly, use the web search tool to find information about this specific article/topic.

Output ONLY valid JSON without Markdown code blocks.
Format:
{{
  "tldr": "A single, powerful sentence summarizing the core value or news. Make it catchy.",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3 (Max 5 points)"],
  "analysis": "A short paragraph (approx 100 words) explaining the background, significance, or technical details."
}}"""


def summary_cache_key(url: str, model_name: str, style: TranslationStyle) -> str:
    """Cache key covering url, model, style and schema version."""
    url_digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:32]
    return f"hn_summary_{SUMMARY_SCHEMA_VERSION}_{url_digest}_{model_name}_{style}"


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker."""
    text = text.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def parse_summary(text: str) -> ArticleSummary | None:
    """Parse model output into an ArticleSummary, or None if unusable."""
    try:
        data = json.loads(strip_code_fences(text))
        return ArticleSummary.model_validate(data)
    except json.JSONDecodeError as e:
        logger.error(f"Summary response is not JSON: {e}")
    except ValidationError as e:
        logger.error(f"Invalid summary format received: {e}")
    return None


class SummarizerService:
    """Service for generating grounded article summaries."""

    def __init__(self, cache: JsonCache, api_key: str | None = None) -> None:
        """Initialize the summarizer."""
        self.cache = cache
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.client = AsyncOpenAI(api_key=self.api_key)
        self.model_names = {
            SummaryModel.FAST: settings.summary_model_fast,
            SummaryModel.ADVANCED: settings.summary_model_advanced,
        }

    def resolve_model(self, model: SummaryModel) -> str:
        """Concrete model name for a tier."""
        return self.model_names[model]

    async def summarize(
        self,
        url: str,
        title: str,
        model: SummaryModel,
        style: TranslationStyle,
        force_refresh: bool = False,
    ) -> ArticleSummary | None:
        """Summarize the article at url.

        Args:
            url: Article url
            title: Story title, given to the model as context
            model: Model tier
            style: Translation style for the summary text
            force_refresh: Skip the cache read; the result still overwrites
                the cache entry

        Returns:
            A validated summary, or None if generation or validation failed
        """
        model_name = self.resolve_model(model)
        cache_key = summary_cache_key(url, model_name, style)

        if not force_refresh:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                try:
                    return ArticleSummary.model_validate(cached)
                except ValidationError:
                    logger.warning(f"Discarding invalid cached summary {cache_key}")

        if not self.api_key:
            logger.warning("OpenAI API key not configured")
            return None

        prompt = SUMMARIZATION_PROMPT.format(
            title=title,
            url=url,
            style_instruction=style_instruction(style),
        )

        try:
            response = await self.client.responses.create(
                model=model_name,
                input=prompt,
                tools=[{"type": "web_search"}],
            )
            text = response.output_text
        except Exception as e:
            logger.error(f"Failed to summarize {url}: {e}")
            return None

        if not text:
            logger.warning(f"Empty summary response for {url}")
            return None

        summary = parse_summary(text)
        if summary is None:
            return None

        await self.cache.set(cache_key, summary.model_dump(by_alias=True))
        logger.info(f"Summarized {url} with {model_name}")
        return summary
