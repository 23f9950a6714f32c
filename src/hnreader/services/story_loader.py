"""Story list loading - resolves ranked id batches into stories."""

import logging
from dataclasses import dataclass

from hnreader.domain.story import Story
from hnreader.infrastructure.hn_client import HNClient

logger = logging.getLogger(__name__)


@dataclass
class StoryBatch:
    """A resolved slice of the ranked id list."""

    stories: list[Story]
    next_offset: int
    has_more: bool


class StoryLoader:
    """Service for paging through HN top stories."""

    def __init__(self, hn_client: HNClient) -> None:
        """Initialize loader with an HN client."""
        self.hn_client = hn_client

    async def list_top_story_ids(self) -> list[int]:
        """Get the ranked candidate ids. Empty means nothing is available."""
        return await self.hn_client.get_top_story_ids()

    async def resolve_stories(self, ids: list[int]) -> list[Story]:
        """Resolve ids to link stories, preserving input order."""
        if not ids:
            return []
        return await self.hn_client.get_stories(ids)

    async def load_batch(self, ids: list[int], offset: int, size: int) -> StoryBatch:
        """Resolve ids[offset:offset + size].

        Args:
            ids: Full ranked id list
            offset: Index of the first id in the batch
            size: Number of ids in the batch

        Returns:
            StoryBatch; the batch may hold fewer than size stories after
            invalid items are dropped
        """
        batch_ids = ids[offset : offset + size]
        stories = await self.resolve_stories(batch_ids)
        next_offset = offset + size
        logger.info(
            f"Loaded batch at offset {offset}: {len(stories)}/{len(batch_ids)} stories"
        )
        return StoryBatch(
            stories=stories,
            next_offset=next_offset,
            has_more=next_offset < len(ids),
        )
