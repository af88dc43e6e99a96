import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from progress_engine.config.settings import get_settings
from progress_engine.database.engine import engine
from progress_engine.exceptions import ConflictError, StorageUnavailableError


logger = logging.getLogger(__name__)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session generator.

    Yields
    ------
        AsyncSession: Database session without automatic commit.
        The service layer should handle commits/rollbacks.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def unit_of_work(session: AsyncSession, timeout: float | None = None) -> AsyncIterator[AsyncSession]:
    """Run the enclosed block as one transaction with a deadline.

    Commits on success. Any failure (including the deadline firing) rolls the
    transaction back, so callers never observe partial state. Driver-level
    failures are translated into the domain taxonomy:

    - ``TimeoutError`` / ``OperationalError`` -> ``StorageUnavailableError``
    - ``IntegrityError`` -> ``ConflictError``
    """
    deadline = timeout if timeout is not None else get_settings().STORE_TIMEOUT_SECONDS

    try:
        async with asyncio.timeout(deadline):
            yield session
            await session.commit()
    except TimeoutError as e:
        await session.rollback()
        logger.warning("Store call exceeded %.1fs deadline, rolled back", deadline)
        raise StorageUnavailableError("Store call timed out") from e
    except OperationalError as e:
        await session.rollback()
        logger.warning(f"Store unavailable: {e}")
        raise StorageUnavailableError from e
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Integrity conflict, rolled back: {e.orig}")
        raise ConflictError from e
    except Exception:
        await session.rollback()
        raise


# Create a reusable dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
