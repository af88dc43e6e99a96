import uuid
from datetime import datetime
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.database import unit_of_work
from progress_engine.exceptions import ConflictError, ValidationError
from progress_engine.leaderboard.models import ActivityEvent
from progress_engine.progress.models import ContentProgress
from progress_engine.progress.service import ProgressService
from progress_engine.streaks.service import StreakService
from progress_engine.xp.models import XPReason, XPTransaction
from progress_engine.xp.service import XPService


def _naive(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo
    return value.replace(tzinfo=None) if value else value


@pytest.mark.asyncio
async def test_first_report_creates_row(db_session: AsyncSession, user_id: UUID) -> None:
    content_id = uuid.uuid4()
    progress = await ProgressService(db_session).update_progress(user_id, content_id, 40, 30, position="page-12")

    assert progress.progress_percentage == 40
    assert progress.time_spent_seconds == 30
    assert progress.last_position == "page-12"
    assert progress.started_at is not None
    assert progress.completed_at is None


@pytest.mark.asyncio
async def test_time_is_additive_and_position_sticky(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)
    content_id = uuid.uuid4()

    first = await service.update_progress(user_id, content_id, 10, 30, position="p1")
    second = await service.update_progress(user_id, content_id, 20, 45)

    assert second.time_spent_seconds == 75
    assert second.last_position == "p1"
    assert _naive(second.started_at) == _naive(first.started_at)


@pytest.mark.asyncio
async def test_completion_is_monotonic(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)
    content_id = uuid.uuid4()

    await service.update_progress(user_id, content_id, 60, 0)
    completed = await service.update_progress(user_id, content_id, 100, 0)
    assert completed.completed_at is not None

    for percent in (20, 0, 100, 35):
        later = await service.update_progress(user_id, content_id, percent, 5)
        assert later.progress_percentage == 100
        assert _naive(later.completed_at) == _naive(completed.completed_at)

    stored = await service.get_progress(user_id, content_id)
    assert stored.progress_percentage == 100
    assert stored.time_spent_seconds == 20


@pytest.mark.asyncio
async def test_completion_awards_content_xp_once(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)
    content_id = uuid.uuid4()

    await service.update_progress(user_id, content_id, 100, 0)
    await service.update_progress(user_id, content_id, 100, 0)

    awards = (
        await db_session.execute(
            select(XPTransaction).where(
                XPTransaction.user_id == user_id,
                XPTransaction.reason == XPReason.CONTENT_COMPLETED.value,
            )
        )
    ).scalars().all()
    assert len(awards) == 1
    assert awards[0].reference_id == content_id
    assert (await XPService(db_session).get_xp_summary(user_id)).total_xp == 15


@pytest.mark.asyncio
async def test_positive_progress_counts_as_activity(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)

    await service.update_progress(user_id, uuid.uuid4(), 0, 10)
    assert (await StreakService(db_session).get_streak(user_id)).current_streak == 0

    await service.update_progress(user_id, uuid.uuid4(), 5, 10)
    assert (await StreakService(db_session).get_streak(user_id)).current_streak == 1

    events = await db_session.scalar(
        select(func.count()).select_from(ActivityEvent).where(ActivityEvent.user_id == user_id)
    )
    assert events == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("percent", "delta"), [(float("nan"), 0), (50, -10)])
async def test_invalid_input_is_rejected(db_session: AsyncSession, user_id: UUID, percent: float, delta: int) -> None:
    content_id = uuid.uuid4()
    with pytest.raises(ValidationError):
        await ProgressService(db_session).update_progress(user_id, content_id, percent, delta)
    assert await ProgressService(db_session).get_progress(user_id, content_id) is None


@pytest.mark.asyncio
async def test_progress_is_per_user(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)
    content_id = uuid.uuid4()
    other_user = uuid.uuid4()

    await service.update_progress(user_id, content_id, 100, 0)
    other = await service.update_progress(other_user, content_id, 10, 0)

    assert other.progress_percentage == 10
    assert other.completed_at is None


@pytest.mark.asyncio
async def test_out_of_range_percent_is_clamped(db_session: AsyncSession, user_id: UUID) -> None:
    service = ProgressService(db_session)
    below = await service.update_progress(user_id, uuid.uuid4(), -20)
    assert below.progress_percentage == 0.0
    assert below.completed_at is None

    above = await service.update_progress(user_id, uuid.uuid4(), 140)
    assert above.progress_percentage == 100.0
    assert above.completed_at is not None


@pytest.mark.asyncio
async def test_later_report_recovers_lost_completion_award(
    db_session: AsyncSession, user_id: UUID, monkeypatch
) -> None:
    async def _boom(*_args, **_kwargs):
        raise RuntimeError("xp store down")

    service = ProgressService(db_session)
    content_id = uuid.uuid4()
    with monkeypatch.context() as patched:
        patched.setattr(XPService, "award_xp", _boom)
        await service.update_progress(user_id, content_id, 100)
    assert (await XPService(db_session).get_xp_summary(user_id)).total_xp == 0

    await service.update_progress(user_id, content_id, 100, 30)

    assert (await XPService(db_session).get_xp_summary(user_id)).total_xp == 15


@pytest.mark.asyncio
async def test_lost_first_insert_race_updates_winning_row(
    db_session: AsyncSession, user_id: UUID, monkeypatch
) -> None:
    original = ProgressService._apply
    attempts = 0

    async def racing_apply(self, user, content, percent, delta, position):
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            # A concurrent first report inserted the row before ours
            async with unit_of_work(self.session):
                self.session.add(
                    ContentProgress(user_id=user, content_id=content, progress_percentage=10.0, time_spent_seconds=40)
                )
            raise ConflictError
        return await original(self, user, content, percent, delta, position)

    monkeypatch.setattr(ProgressService, "_apply", racing_apply)
    content_id = uuid.uuid4()

    progress = await ProgressService(db_session).update_progress(user_id, content_id, 30, 20)

    assert attempts == 2
    assert progress.progress_percentage == 30
    assert progress.time_spent_seconds == 60
    rows = await db_session.scalar(
        select(func.count()).select_from(ContentProgress).where(ContentProgress.user_id == user_id)
    )
    assert rows == 1
