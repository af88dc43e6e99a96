"""Streak ledger: consecutive calendar days with at least one learning activity."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.database import unit_of_work
from progress_engine.exceptions import ConflictError

from .models import UserStreak


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreakSnapshot:
    current_streak: int
    longest_streak: int
    last_active_on: date | None = None


def advance_streak(current: int, longest: int, last_active_on: date | None, today: date) -> tuple[int, int]:
    """Return the (current, longest) pair after activity on ``today``.

    Same day leaves the pair untouched, the next day extends the run by one and
    any other gap (or no history) starts a new run at 1.
    """
    if last_active_on == today:
        return current, longest
    if last_active_on is not None and last_active_on == today - timedelta(days=1):
        current += 1
    else:
        current = 1
    return current, max(longest, current)


class StreakService:
    """Maintains one ``UserStreak`` row per user."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout

    async def record_activity(self, user_id: UUID, today: date) -> StreakSnapshot:
        """Count ``today`` as an active day for the user.

        The row is read ``FOR UPDATE`` so concurrent same-day events serialize.
        Two first-ever events racing on the insert surface as ConflictError;
        the loser re-reads the winner's row once.
        """
        try:
            return await self._record_once(user_id, today)
        except ConflictError:
            logger.info(f"Streak row for user {user_id} was created concurrently, retrying")
            return await self._record_once(user_id, today)

    async def _record_once(self, user_id: UUID, today: date) -> StreakSnapshot:
        async with unit_of_work(self.session, self.timeout):
            result = await self.session.execute(
                select(UserStreak)
                .where(UserStreak.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            streak = result.scalar_one_or_none()

            if streak is None:
                streak = UserStreak(user_id=user_id, current_streak=1, longest_streak=1, last_active_on=today)
                self.session.add(streak)
                logger.debug(f"Started streak for user {user_id} on {today}")
            elif streak.last_active_on != today:
                streak.current_streak, streak.longest_streak = advance_streak(
                    streak.current_streak, streak.longest_streak, streak.last_active_on, today
                )
                streak.last_active_on = today

            snapshot = StreakSnapshot(
                current_streak=streak.current_streak,
                longest_streak=streak.longest_streak,
                last_active_on=streak.last_active_on,
            )
        return snapshot

    async def get_streak(self, user_id: UUID) -> StreakSnapshot:
        """Current and longest streak, zeros for a user with no activity yet."""
        streak = await self.session.get(UserStreak, user_id)
        if streak is None:
            return StreakSnapshot(current_streak=0, longest_streak=0)
        return StreakSnapshot(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_active_on=streak.last_active_on,
        )
