"""Tests for ReaderSession: batching, translation state, generation guards."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from hnreader.domain.operation import Failed, FailureReason, Loading, Ready
from hnreader.domain.preferences import ReaderPreferences
from hnreader.domain.story import Story, TranslationState
from hnreader.domain.summary import ArticleSummary, SummaryModel
from hnreader.domain.translation import TranslationResult, TranslationStyle
from hnreader.repositories.preferences_repo import PreferencesRepository
from hnreader.services.reader import ReaderSession
from hnreader.services.story_loader import StoryBatch, StoryLoader

SUMMARY = ArticleSummary(tldr="Hook", key_points=["a"], analysis="Text")


def _story(story_id: int, url: str | None = "default") -> Story:
    return Story(
        id=story_id,
        title=f"Story {story_id}",
        url=f"https://example.com/{story_id}" if url == "default" else url,
        author="author",
        created_at_epoch=1700000000,
        score=1,
        kind="story",
    )


def _translate_all(stories, style, force_refresh=False):
    return [
        TranslationResult(id=s.id, translated_title=f"{style}:{s.id}") for s in stories
    ]


def _make_reader(cache, ids=None, batch_size=2) -> ReaderSession:
    hn_client = MagicMock()
    hn_client.get_top_story_ids = AsyncMock(return_value=ids if ids is not None else [1, 2, 3, 4, 5])
    hn_client.get_stories = AsyncMock(
        side_effect=lambda batch_ids: [_story(i) for i in batch_ids]
    )

    translator = MagicMock()
    translator.translate = AsyncMock(side_effect=_translate_all)

    summarizer = MagicMock()
    summarizer.summarize = AsyncMock(return_value=SUMMARY)

    return ReaderSession(
        loader=StoryLoader(hn_client),
        translator=translator,
        summarizer=summarizer,
        preferences_repo=PreferencesRepository(cache),
        batch_size=batch_size,
    )


class TestLoadInitial:
    """Tests for the first batch load."""

    @pytest.mark.asyncio
    async def test_loads_first_batch_and_translates(self, cache):
        reader = _make_reader(cache)

        stories = await reader.load_initial()

        assert [s.id for s in stories] == [1, 2]
        assert reader.loaded is True
        assert reader.loaded_count == 2
        assert reader.has_more is True
        assert [s.translated_title for s in stories] == ["tech:1", "tech:2"]
        assert all(s.translation_state == TranslationState.DONE for s in stories)

    @pytest.mark.asyncio
    async def test_untranslated_ids_marked_failed(self, cache):
        reader = _make_reader(cache)
        reader.translator.translate = AsyncMock(
            return_value=[TranslationResult(id=1, translated_title="一")]
        )

        stories = await reader.load_initial()

        assert stories[0].translation_state == TranslationState.DONE
        assert stories[1].translation_state == TranslationState.FAILED
        assert stories[1].translated_title is None

    @pytest.mark.asyncio
    async def test_empty_listing_loads_nothing(self, cache):
        reader = _make_reader(cache, ids=[])

        assert await reader.load_initial() == []
        assert reader.has_more is False
        reader.translator.translate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_replaces_list(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        await reader.load_more()

        await reader.load_initial()

        assert [s.id for s in reader.stories] == [1, 2]
        assert reader.loaded_count == 2


class TestLoadMore:
    """Tests for appending batches."""

    @pytest.mark.asyncio
    async def test_appends_next_batch(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()

        added = await reader.load_more()

        assert [s.id for s in added] == [3, 4]
        assert [s.id for s in reader.stories] == [1, 2, 3, 4]
        assert reader.loaded_count == 4
        assert added[0].translated_title == "tech:3"

    @pytest.mark.asyncio
    async def test_noop_when_everything_loaded(self, cache):
        reader = _make_reader(cache, ids=[1, 2])
        await reader.load_initial()

        assert await reader.load_more() == []
        assert reader.loader.hn_client.get_stories.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_load_more_is_ignored(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        gate = asyncio.Event()
        original = reader.loader.load_batch

        async def gated_batch(ids, offset, size):
            await gate.wait()
            return await original(ids, offset, size)

        reader.loader.load_batch = gated_batch

        first = asyncio.create_task(reader.load_more())
        await asyncio.sleep(0)
        second = await reader.load_more()
        gate.set()
        added = await first

        assert second == []
        assert [s.id for s in added] == [3, 4]

    @pytest.mark.asyncio
    async def test_batch_discarded_after_refresh(self, cache):
        """A load-more that finishes after a refresh does not append."""
        reader = _make_reader(cache)
        await reader.load_initial()
        gate = asyncio.Event()

        async def gated_batch(ids, offset, size):
            if offset > 0:
                await gate.wait()
            return StoryBatch(
                stories=[_story(i) for i in ids[offset : offset + size]],
                next_offset=offset + size,
                has_more=offset + size < len(ids),
            )

        reader.loader.load_batch = gated_batch

        pending = asyncio.create_task(reader.load_more())
        await asyncio.sleep(0)
        await reader.load_initial()
        gate.set()

        assert await pending == []
        assert [s.id for s in reader.stories] == [1, 2]
        assert reader.loaded_count == 2

    @pytest.mark.asyncio
    async def test_batch_started_during_refresh_is_discarded(self, cache):
        """A load-more issued while a refresh is in flight never reaches the new list."""
        reader = _make_reader(cache)
        await reader.load_initial()
        ids_gate = asyncio.Event()
        batch_gate = asyncio.Event()
        original = reader.loader.load_batch

        async def gated_ids():
            await ids_gate.wait()
            return [10, 11, 12, 13, 14]

        async def gated_batch(ids, offset, size):
            if offset > 0:
                await batch_gate.wait()
            return await original(ids, offset, size)

        reader.loader.hn_client.get_top_story_ids = AsyncMock(side_effect=gated_ids)
        reader.loader.load_batch = gated_batch

        refresh = asyncio.create_task(reader.load_initial())
        await asyncio.sleep(0)
        more = asyncio.create_task(reader.load_more())
        await asyncio.sleep(0)
        ids_gate.set()
        await refresh
        batch_gate.set()

        assert await more == []
        assert [s.id for s in reader.stories] == [10, 11]
        assert reader.loaded_count == 2
        assert reader.all_ids == [10, 11, 12, 13, 14]


class TestTranslation:
    """Tests for translation triggering and application."""

    @pytest.mark.asyncio
    async def test_skips_already_translated(self, cache):
        reader = _make_reader(cache)
        stories = [_story(1), _story(2)]
        stories[0].apply_translation("已翻译")

        await reader.translate_stories(stories)

        sent = reader.translator.translate.call_args.args[0]
        assert [s.id for s in sent] == [2]

    @pytest.mark.asyncio
    async def test_style_change_forces_retranslation(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        reader.translator.translate.reset_mock()

        await reader.update_preferences(
            ReaderPreferences(translation_style=TranslationStyle.FUN)
        )

        reader.translator.translate.assert_awaited_once()
        args = reader.translator.translate.call_args
        assert [s.id for s in args.args[0]] == [1, 2]
        assert args.args[1] == TranslationStyle.FUN
        assert args.kwargs["force_refresh"] is True
        assert [s.translated_title for s in reader.stories] == ["fun:1", "fun:2"]

    @pytest.mark.asyncio
    async def test_same_style_does_not_retranslate(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        reader.translator.translate.reset_mock()

        await reader.update_preferences(ReaderPreferences(summary_model=SummaryModel.ADVANCED))

        reader.translator.translate.assert_not_awaited()
        assert (await reader.preferences_repo.load()).summary_model == SummaryModel.ADVANCED

    @pytest.mark.asyncio
    async def test_results_for_superseded_style_discarded(self, cache):
        reader = _make_reader(cache)
        story = _story(1)

        async def translate_then_style_changes(stories, style, force_refresh=False):
            reader.preferences = ReaderPreferences(translation_style=TranslationStyle.FUN)
            return _translate_all(stories, style)

        reader.translator.translate = AsyncMock(side_effect=translate_then_style_changes)

        applied = await reader.translate_stories([story])

        assert applied == 0
        assert story.translated_title is None

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_title(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        reader.translator.translate = AsyncMock(return_value=[])

        story = await reader.refresh_translation(1)

        assert story.translated_title == "tech:1"
        assert story.translation_state == TranslationState.DONE

    @pytest.mark.asyncio
    async def test_refresh_translation_is_forced(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()

        await reader.refresh_translation(2)

        args = reader.translator.translate.call_args
        assert [s.id for s in args.args[0]] == [2]
        assert args.kwargs["force_refresh"] is True

    @pytest.mark.asyncio
    async def test_refresh_translation_unknown_story(self, cache):
        reader = _make_reader(cache)
        assert await reader.refresh_translation(42) is None


class TestPreferences:
    """Tests for preference loading."""

    @pytest.mark.asyncio
    async def test_load_preferences_reads_saved_record(self, cache):
        await PreferencesRepository(cache).save(
            ReaderPreferences(translation_style=TranslationStyle.CONCISE)
        )
        reader = _make_reader(cache)

        prefs = await reader.load_preferences()

        assert prefs.translation_style == TranslationStyle.CONCISE
        assert reader.preferences == prefs


class TestRequestSummary:
    """Tests for summary operation states."""

    @pytest.mark.asyncio
    async def test_unknown_story_returns_none(self, cache):
        reader = _make_reader(cache)
        assert await reader.request_summary(42) is None

    @pytest.mark.asyncio
    async def test_ready_with_summary(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()

        state = await reader.request_summary(1)

        assert isinstance(state, Ready)
        assert state.value.summary == SUMMARY
        assert state.value.model == SummaryModel.FAST
        assert state.value.style == TranslationStyle.TECH
        assert reader.summary_state(1) == state
        reader.summarizer.summarize.assert_awaited_once_with(
            "https://example.com/1",
            "Story 1",
            SummaryModel.FAST,
            TranslationStyle.TECH,
            force_refresh=False,
        )

    @pytest.mark.asyncio
    async def test_story_without_link(self, cache):
        reader = _make_reader(cache)
        reader.stories = [_story(7, url=None)]

        state = await reader.request_summary(7)

        assert isinstance(state, Failed)
        assert state.reason == FailureReason.NO_LINK
        reader.summarizer.summarize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generation_failure(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        reader.summarizer.summarize = AsyncMock(return_value=None)

        state = await reader.request_summary(1, force_refresh=True)

        assert isinstance(state, Failed)
        assert state.reason == FailureReason.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_loading_state_while_in_flight(self, cache):
        reader = _make_reader(cache)
        await reader.load_initial()
        gate = asyncio.Event()

        async def gated_summarize(*args, **kwargs):
            await gate.wait()
            return SUMMARY

        reader.summarizer.summarize = gated_summarize

        pending = asyncio.create_task(reader.request_summary(1))
        await asyncio.sleep(0)
        assert isinstance(reader.summary_state(1), Loading)

        gate.set()
        await pending
        assert isinstance(reader.summary_state(1), Ready)

    @pytest.mark.asyncio
    async def test_stale_completion_does_not_overwrite(self, cache):
        """An older request finishing last leaves the newer result in place."""
        reader = _make_reader(cache)
        await reader.load_initial()
        gate = asyncio.Event()
        newer = ArticleSummary(tldr="Newer", key_points=[], analysis="Text")

        async def summarize(url, title, model, style, force_refresh=False):
            if not force_refresh:
                await gate.wait()
                return SUMMARY
            return newer

        reader.summarizer.summarize = summarize

        old = asyncio.create_task(reader.request_summary(1))
        await asyncio.sleep(0)
        await reader.request_summary(1, force_refresh=True)
        gate.set()
        old_state = await old

        assert old_state.value.summary == SUMMARY
        assert reader.summary_state(1).value.summary == newer
