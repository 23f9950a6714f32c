"""Reader session - the loaded story list and everything hanging off it."""

import logging
from collections import defaultdict

from hnreader.config import get_settings
from hnreader.domain.operation import (
    Failed,
    FailureReason,
    GenerationCounter,
    Loading,
    OperationState,
    Ready,
)
from hnreader.domain.preferences import ReaderPreferences
from hnreader.domain.story import Story, TranslationState
from hnreader.domain.summary import GeneratedSummary
from hnreader.repositories.preferences_repo import PreferencesRepository
from hnreader.services.story_loader import StoryLoader
from hnreader.services.summarizer import SummarizerService
from hnreader.services.translator import TranslationService

logger = logging.getLogger(__name__)
settings = get_settings()


class ReaderSession:
    """Holds the ranked story list, preferences and pending summaries.

    Loads and summaries are tagged with generations; a completion that
    belongs to a superseded request is dropped instead of overwriting
    newer state.
    """

    def __init__(
        self,
        loader: StoryLoader,
        translator: TranslationService,
        summarizer: SummarizerService,
        preferences_repo: PreferencesRepository,
        batch_size: int | None = None,
    ) -> None:
        """Initialize an empty session."""
        self.loader = loader
        self.translator = translator
        self.summarizer = summarizer
        self.preferences_repo = preferences_repo
        self.batch_size = batch_size or settings.story_batch_size

        self.preferences = ReaderPreferences()
        self.all_ids: list[int] = []
        self.stories: list[Story] = []
        self.loaded_count = 0
        self.loaded = False
        self.summaries: dict[int, OperationState] = {}

        self._list_generation = GenerationCounter()
        # Generation of the list currently held in all_ids/stories
        self._committed_generation = 0
        self._summary_generations: dict[int, GenerationCounter] = defaultdict(
            GenerationCounter
        )
        self._loading_more = False

    @property
    def has_more(self) -> bool:
        """True while ranked ids remain beyond the loaded batches."""
        return self.loaded_count < len(self.all_ids)

    def get_story(self, story_id: int) -> Story | None:
        """Find a loaded story by id."""
        for story in self.stories:
            if story.id == story_id:
                return story
        return None

    async def load_preferences(self) -> ReaderPreferences:
        """Replace in-memory preferences with the saved record."""
        self.preferences = await self.preferences_repo.load()
        return self.preferences

    async def load_initial(self) -> list[Story]:
        """Fetch the ranked ids and the first batch, replacing the list."""
        generation = self._list_generation.next()

        ids = await self.loader.list_top_story_ids()
        if not self._list_generation.is_current(generation):
            logger.info("Discarding superseded story list")
            return self.stories

        batch = await self.loader.load_batch(ids, 0, self.batch_size)
        if not self._list_generation.is_current(generation):
            logger.info("Discarding superseded first batch")
            return self.stories

        self.all_ids = ids
        self._committed_generation = generation
        self.stories = batch.stories
        self.loaded_count = batch.next_offset
        self.loaded = True
        self.summaries = {}

        await self.translate_stories(batch.stories)
        return self.stories

    async def load_more(self) -> list[Story]:
        """Append the next batch. Returns the newly added stories."""
        if self._loading_more or not self.has_more:
            return []

        generation = self._committed_generation
        self._loading_more = True
        try:
            batch = await self.loader.load_batch(
                self.all_ids, self.loaded_count, self.batch_size
            )
        finally:
            self._loading_more = False

        if (
            generation != self._committed_generation
            or not self._list_generation.is_current(generation)
        ):
            logger.info("Discarding batch for a refreshed story list")
            return []

        self.stories.extend(batch.stories)
        self.loaded_count = batch.next_offset

        await self.translate_stories(batch.stories)
        return batch.stories

    async def translate_stories(self, stories: list[Story], force: bool = False) -> int:
        """Translate titles under the current style and attach the results.

        Args:
            stories: Stories to translate
            force: Retranslate even stories that already carry a title

        Returns:
            Number of titles applied
        """
        style = self.preferences.translation_style
        targets = stories if force else [s for s in stories if not s.translated_title]
        if not targets:
            return 0

        for story in targets:
            story.translation_state = TranslationState.PENDING

        results = await self.translator.translate(targets, style, force_refresh=force)

        if style != self.preferences.translation_style:
            logger.info(f"Discarding translations for superseded style {style}")
            return 0

        titles = {r.id: r.translated_title for r in results}
        for story in targets:
            title = titles.get(story.id)
            if title:
                story.apply_translation(title)
            elif story.translated_title:
                story.translation_state = TranslationState.DONE
            else:
                story.translation_state = TranslationState.FAILED

        return len(titles)

    async def refresh_translation(self, story_id: int) -> Story | None:
        """Force a fresh translation of one loaded story."""
        story = self.get_story(story_id)
        if story is None:
            return None
        await self.translate_stories([story], force=True)
        return story

    async def update_preferences(self, preferences: ReaderPreferences) -> ReaderPreferences:
        """Save new preferences; a style change retranslates every story."""
        style_changed = preferences.translation_style != self.preferences.translation_style
        self.preferences = preferences
        await self.preferences_repo.save(preferences)

        if style_changed and self.stories:
            logger.info(f"Translation style changed to {preferences.translation_style}")
            await self.translate_stories(list(self.stories), force=True)
        return self.preferences

    def summary_state(self, story_id: int) -> OperationState | None:
        """Latest summary state for a story, if one was requested."""
        return self.summaries.get(story_id)

    async def request_summary(
        self, story_id: int, force_refresh: bool = False
    ) -> OperationState | None:
        """Summarize a loaded story.

        Returns:
            None for an unknown story, otherwise the outcome of this request:
            Ready with the summary and the preferences that produced it, or
            Failed with the reason
        """
        story = self.get_story(story_id)
        if story is None:
            return None

        counter = self._summary_generations[story_id]
        generation = counter.next()

        if not story.url:
            state: OperationState = Failed(FailureReason.NO_LINK, generation)
            self.summaries[story_id] = state
            return state

        self.summaries[story_id] = Loading(generation)
        preferences = self.preferences
        summary = await self.summarizer.summarize(
            story.url,
            story.title,
            preferences.summary_model,
            preferences.translation_style,
            force_refresh=force_refresh,
        )

        if summary is not None:
            state = Ready(
                GeneratedSummary(
                    summary=summary,
                    model=preferences.summary_model,
                    style=preferences.translation_style,
                ),
                generation,
            )
        else:
            state = Failed(FailureReason.UNAVAILABLE, generation)

        if counter.is_current(generation):
            self.summaries[story_id] = state
        else:
            logger.info(f"Discarding superseded summary for story {story_id}")
        return state
