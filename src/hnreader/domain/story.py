"""Story domain entity."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from urllib.parse import urlparse


class TranslationState(StrEnum):
    """Progress of a story's title translation."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Story:
    """Represents a Hacker News story."""

    id: int
    title: str
    url: str | None
    author: str
    created_at_epoch: int
    score: int
    kind: str
    comment_count: int | None = None
    child_ids: list[int] | None = None
    translated_title: str | None = None
    translation_state: TranslationState | None = None

    @property
    def created_at(self) -> datetime:
        """Submission time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.created_at_epoch, tz=UTC)

    @property
    def is_link_story(self) -> bool:
        """True for items of kind 'story' that point at an external url."""
        return self.kind == "story" and bool(self.url)

    @staticmethod
    def _sanitize_url(url: str | None) -> str | None:
        """Reject non-HTTP(S) URLs to prevent javascript: XSS."""
        if not url:
            return None
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            return url
        return None

    @classmethod
    def from_hn_api(cls, data: dict) -> "Story":
        """Create Story from HN API response."""
        kids = data.get("kids")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            url=cls._sanitize_url(data.get("url")),
            author=data.get("by", "unknown"),
            created_at_epoch=data.get("time", 0),
            score=data.get("score", 0),
            kind=data.get("type", "unknown"),
            comment_count=data.get("descendants"),
            child_ids=list(kids) if kids is not None else None,
        )

    def apply_translation(self, translated_title: str) -> None:
        """Attach a finished translation."""
        self.translated_title = translated_title
        self.translation_state = TranslationState.DONE
