"""Database initialization: register every model and create missing tables."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from .base import Base


logger = logging.getLogger(__name__)


def register_models() -> None:
    """Import every model module so its tables are on ``Base.metadata``."""
    import progress_engine.catalog.models
    import progress_engine.courses.models
    import progress_engine.leaderboard.models
    import progress_engine.progress.models
    import progress_engine.streaks.models
    import progress_engine.xp.models  # noqa: F401


async def init_database(db_engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    register_models()
    async with db_engine.begin() as conn:
        logger.info("Creating database tables from models...")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("All tables created successfully")


async def drop_database(db_engine: AsyncEngine) -> None:
    """Drop every table known to the models."""
    register_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
