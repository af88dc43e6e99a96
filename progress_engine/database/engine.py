from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from progress_engine.config.settings import get_settings


settings = get_settings()


def create_app_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async engine for the progress store.

    - SQLite (aiosqlite): one shared connection, so in-memory databases live
      as long as the engine.
    - Postgres via psycopg3: pooled with pre-ping, sized from settings.
      ``DB_DISABLE_PREPARED_STATEMENTS`` is for transaction poolers, which do
      not support them.
    """
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    connect_args: dict[str, Any] = {"connect_timeout": 10}
    if settings.DB_DISABLE_PREPARED_STATEMENTS:
        connect_args["prepare_threshold"] = None

    return create_async_engine(
        url,
        echo=False,  # Set True for SQL debugging
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
        pool_use_lifo=True,
        connect_args=connect_args,
    )


engine: AsyncEngine = create_app_engine()
