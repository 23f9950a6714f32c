"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text

from hnreader.api.v1.router import router as api_router
from hnreader.config import get_settings
from hnreader.infrastructure.cache import JsonCache
from hnreader.infrastructure.database import async_session_factory, init_db
from hnreader.infrastructure.hn_client import HNClient
from hnreader.infrastructure.kv_store import SqlKeyValueStore
from hnreader.repositories.preferences_repo import PreferencesRepository
from hnreader.services.reader import ReaderSession
from hnreader.services.story_loader import StoryLoader
from hnreader.services.summarizer import SummarizerService
from hnreader.services.translator import TranslationService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_reader(cache: JsonCache, hn_client: HNClient) -> ReaderSession:
    """Wire the services that make up a reader session."""
    return ReaderSession(
        loader=StoryLoader(hn_client),
        translator=TranslationService(cache),
        summarizer=SummarizerService(cache),
        preferences_repo=PreferencesRepository(cache),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting HN Reader application...")
    logger.info(f"Environment: {settings.environment}")

    await init_db()
    cache = JsonCache(
        SqlKeyValueStore(async_session_factory, settings.cache_max_value_bytes)
    )
    hn_client = HNClient()
    reader = build_reader(cache, hn_client)
    await reader.load_preferences()
    app.state.reader = reader

    yield

    await hn_client.close()
    logger.info("Shutting down HN Reader application...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    docs_kwargs = {}
    if settings.is_production:
        docs_kwargs = {"docs_url": None, "redoc_url": None, "openapi_url": None}

    app = FastAPI(
        title="HN Reader",
        description="Hacker News top stories with translated titles and AI summaries",
        version="0.1.0",
        lifespan=lifespan,
        **docs_kwargs,
    )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Lightweight health check with cache store connectivity test."""
        try:
            async with async_session_factory() as session:
                await session.execute(text("SELECT 1"))
            return JSONResponse({"status": "healthy", "cache": "connected"})
        except Exception:
            return JSONResponse(
                {"status": "unhealthy", "cache": "disconnected"},
                status_code=503,
            )

    return app


# Create app instance
app = create_app()
