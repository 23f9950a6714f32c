"""Hacker News Firebase API client."""

import asyncio
import logging
from typing import Any

import aiohttp
from aiohttp import ClientTimeout

from hnreader.config import get_settings
from hnreader.domain.story import Story

logger = logging.getLogger(__name__)
settings = get_settings()


class HNClient:
    """Async client for Hacker News Firebase API.

    Every request is a single attempt: failures are logged and surface as
    None or an empty list, never as an exception.
    """

    def __init__(
        self,
        base_url: str | None = None,
        max_concurrent: int | None = None,
        timeout_seconds: int | None = None,
    ) -> None:
        """Initialize HN client.

        Args:
            base_url: HN API base URL (defaults to config)
            max_concurrent: Maximum concurrent item requests
            timeout_seconds: Per-request timeout in seconds
        """
        self.base_url = base_url or settings.hn_api_base_url
        self.semaphore = asyncio.Semaphore(max_concurrent or settings.hn_max_concurrent)
        self.timeout = ClientTimeout(total=timeout_seconds or settings.hn_timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _fetch_json(self, url: str) -> Any | None:
        """Fetch and decode a JSON document.

        Args:
            url: URL to fetch

        Returns:
            Decoded JSON or None if the request failed
        """
        session = await self._get_session()

        async with self.semaphore:
            try:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(f"HTTP {response.status} for {url}")
                        return None
                    return await response.json()
            except TimeoutError:
                logger.warning(f"Timeout fetching {url}")
            except aiohttp.ClientError as e:
                logger.warning(f"Client error fetching {url}: {e}")
            except ValueError as e:
                logger.warning(f"Invalid JSON from {url}: {e}")
            return None

    async def get_top_story_ids(self) -> list[int]:
        """Get the ranked top story IDs from HN.

        Returns:
            List of story IDs, empty if the listing could not be fetched
        """
        url = f"{self.base_url}/topstories.json"
        data = await self._fetch_json(url)

        if not isinstance(data, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) for i in data
        ):
            if data is not None:
                logger.warning(f"Unexpected top stories payload: {type(data)}")
            return []

        logger.info(f"Fetched {len(data)} top story IDs")
        return data

    async def get_story(self, story_id: int) -> Story | None:
        """Get a single item by ID.

        Args:
            story_id: HN item ID

        Returns:
            Story domain object of any kind, or None if the fetch failed or
            the item does not exist
        """
        url = f"{self.base_url}/item/{story_id}.json"
        data = await self._fetch_json(url)

        if not isinstance(data, dict):
            return None

        try:
            return Story.from_hn_api(data)
        except (KeyError, TypeError) as e:
            logger.warning(f"Malformed item {story_id}: {e}")
            return None

    async def get_stories(self, story_ids: list[int]) -> list[Story]:
        """Fetch multiple stories concurrently, keeping only link stories.

        Args:
            story_ids: List of HN story IDs in rank order

        Returns:
            Story objects of kind 'story' with an external url, in the same
            order as story_ids
        """
        tasks = [self.get_story(sid) for sid in story_ids]
        # gather returns results positionally, so rank order survives
        # out-of-order completion
        results = await asyncio.gather(*tasks, return_exceptions=True)

        stories = []
        for story_id, result in zip(story_ids, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Error fetching story {story_id}: {result}")
            elif result is not None and result.is_link_story:
                stories.append(result)

        logger.info(f"Successfully fetched {len(stories)}/{len(story_ids)} stories")
        return stories
