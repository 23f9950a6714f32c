"""API v1 router aggregator."""

from fastapi import APIRouter

from hnreader.api.v1.preferences import router as preferences_router
from hnreader.api.v1.stories import router as stories_router

router = APIRouter(prefix="/api/v1")
router.include_router(stories_router)
router.include_router(preferences_router)
