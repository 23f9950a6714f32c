"""SQLAlchemy async database setup."""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from hnreader.config import get_settings
from hnreader.infrastructure.models import Base

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=False)

# Session factory
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(db_engine: AsyncEngine = engine) -> None:
    """Create the cache table if it does not exist yet."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
