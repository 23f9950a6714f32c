"""Story API endpoints."""

from fastapi import APIRouter, HTTPException, Query

from hnreader.api.dependencies import ReaderDep
from hnreader.api.v1.schemas import StoryListResponse, StoryResponse, SummaryResponse
from hnreader.domain.operation import Failed, FailureReason, Ready
from hnreader.services.reader import ReaderSession

router = APIRouter(prefix="/stories", tags=["stories"])


def _story_list(reader: ReaderSession) -> StoryListResponse:
    return StoryListResponse(
        stories=[StoryResponse.model_validate(s) for s in reader.stories],
        total_ids=len(reader.all_ids),
        loaded_count=reader.loaded_count,
        has_more=reader.has_more,
        translation_style=reader.preferences.translation_style,
    )


@router.get("", response_model=StoryListResponse)
async def list_stories(reader: ReaderDep) -> StoryListResponse:
    """List loaded stories in rank order, loading the first batch if needed."""
    if not reader.loaded:
        await reader.load_initial()
    return _story_list(reader)


@router.post("/refresh", response_model=StoryListResponse)
async def refresh_stories(reader: ReaderDep) -> StoryListResponse:
    """Reload the ranked list and its first batch."""
    await reader.load_initial()
    return _story_list(reader)


@router.post("/more", response_model=StoryListResponse)
async def load_more_stories(reader: ReaderDep) -> StoryListResponse:
    """Append the next batch of stories."""
    await reader.load_more()
    return _story_list(reader)


@router.post("/{story_id}/translation", response_model=StoryResponse)
async def refresh_translation(story_id: int, reader: ReaderDep) -> StoryResponse:
    """Retranslate one story's title, bypassing the cache."""
    story = await reader.refresh_translation(story_id)
    if not story:
        raise HTTPException(status_code=404, detail="Story not found")
    return StoryResponse.model_validate(story)


@router.get("/{story_id}/summary", response_model=SummaryResponse)
async def get_summary(
    story_id: int,
    reader: ReaderDep,
    force: bool = Query(False, description="Regenerate instead of using the cache"),
) -> SummaryResponse:
    """Get an AI summary of the story's linked article."""
    state = await reader.request_summary(story_id, force_refresh=force)
    if state is None:
        raise HTTPException(status_code=404, detail="Story not found")
    if isinstance(state, Failed) and state.reason == FailureReason.NO_LINK:
        raise HTTPException(422, "Story has no external link to summarize")
    if not isinstance(state, Ready):
        raise HTTPException(502, "Summary could not be generated, please retry")

    generated = state.value
    return SummaryResponse(
        story_id=story_id,
        tldr=generated.summary.tldr,
        key_points=generated.summary.key_points,
        analysis=generated.summary.analysis,
        model=generated.model,
        style=generated.style,
    )
