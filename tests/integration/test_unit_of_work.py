import asyncio
import uuid
from datetime import date
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.database import unit_of_work
from progress_engine.exceptions import ConflictError, StorageUnavailableError
from progress_engine.streaks.models import UserStreak


async def _streak_rows(session: AsyncSession) -> int:
    return await session.scalar(select(func.count()).select_from(UserStreak))


@pytest.mark.asyncio
async def test_commits_on_success(db_session: AsyncSession, user_id: UUID) -> None:
    async with unit_of_work(db_session):
        db_session.add(UserStreak(user_id=user_id, current_streak=1, longest_streak=1, last_active_on=date(2024, 1, 1)))

    await db_session.rollback()
    assert await _streak_rows(db_session) == 1


@pytest.mark.asyncio
async def test_deadline_rolls_back(db_session: AsyncSession, user_id: UUID) -> None:
    with pytest.raises(StorageUnavailableError):
        async with unit_of_work(db_session, timeout=0.01):
            db_session.add(
                UserStreak(user_id=user_id, current_streak=1, longest_streak=1, last_active_on=date(2024, 1, 1))
            )
            await db_session.flush()
            await asyncio.sleep(1)

    assert await _streak_rows(db_session) == 0


@pytest.mark.asyncio
async def test_integrity_error_becomes_conflict(db_session: AsyncSession) -> None:
    shared = uuid.uuid4()
    async with unit_of_work(db_session):
        db_session.add(UserStreak(user_id=shared, current_streak=1, longest_streak=1, last_active_on=date(2024, 1, 1)))

    db_session.expunge_all()
    with pytest.raises(ConflictError):
        async with unit_of_work(db_session):
            db_session.add(
                UserStreak(user_id=shared, current_streak=2, longest_streak=2, last_active_on=date(2024, 1, 2))
            )

    assert await _streak_rows(db_session) == 1


@pytest.mark.asyncio
async def test_other_errors_roll_back_and_propagate(db_session: AsyncSession, user_id: UUID) -> None:
    with pytest.raises(RuntimeError, match="boom"):
        async with unit_of_work(db_session):
            db_session.add(
                UserStreak(user_id=user_id, current_streak=1, longest_streak=1, last_active_on=date(2024, 1, 1))
            )
            await db_session.flush()
            raise RuntimeError("boom")

    assert await _streak_rows(db_session) == 0
