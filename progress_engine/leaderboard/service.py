"""Leaderboard over rolling XP windows."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.config.settings import get_settings
from progress_engine.exceptions import ValidationError
from progress_engine.xp.levels import LevelCurve
from progress_engine.xp.models import XPTransaction


logger = logging.getLogger(__name__)


class LeaderboardPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all_time"


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    user_id: UUID
    rank: int
    xp: int
    level: int
    is_current_user: bool


@dataclass(frozen=True, slots=True)
class Leaderboard:
    period: LeaderboardPeriod
    entries: list[LeaderboardEntry]
    current_user_rank: int | None


def window_start(period: LeaderboardPeriod, now: datetime) -> datetime | None:
    """Start of the trailing window for ``period``; None means all time."""
    settings = get_settings()
    if period is LeaderboardPeriod.WEEKLY:
        return now - timedelta(days=settings.WEEKLY_WINDOW_DAYS)
    if period is LeaderboardPeriod.MONTHLY:
        return now - timedelta(days=settings.MONTHLY_WINDOW_DAYS)
    return None


class LeaderboardService:
    """Read-only ranking of users by XP earned in a window."""

    def __init__(self, session: AsyncSession, curve: LevelCurve | None = None) -> None:
        self.session = session
        self.curve = curve or LevelCurve.from_settings()

    def _window_totals(self, since: datetime | None):
        xp = func.sum(XPTransaction.amount).label("xp")
        query = select(XPTransaction.user_id.label("user_id"), xp).group_by(XPTransaction.user_id)
        if since is not None:
            query = query.where(XPTransaction.occurred_at >= since)
        return query

    async def get_leaderboard(
        self,
        period: LeaderboardPeriod,
        limit: int,
        current_user_id: UUID | None = None,
        now: datetime | None = None,
    ) -> Leaderboard:
        """Top ``limit`` users by window XP, XP descending then user id ascending.

        ``current_user_rank`` is counted over every user in the window, so it is
        reported even when the caller falls outside the returned entries.
        """
        max_limit = get_settings().LEADERBOARD_MAX_LIMIT
        if not 1 <= limit <= max_limit:
            msg = f"limit must be between 1 and {max_limit}"
            raise ValidationError(msg)

        since = window_start(period, now or datetime.now(UTC))
        totals = self._window_totals(since).subquery()

        result = await self.session.execute(
            select(totals.c.user_id, totals.c.xp)
            .order_by(totals.c.xp.desc(), totals.c.user_id.asc())
            .limit(limit)
        )
        rows = result.all()

        lifetime = await self._lifetime_totals([row.user_id for row in rows])
        entries = [
            LeaderboardEntry(
                user_id=row.user_id,
                rank=position,
                xp=int(row.xp),
                level=self.curve.level_for(lifetime.get(row.user_id, 0)),
                is_current_user=row.user_id == current_user_id,
            )
            for position, row in enumerate(rows, start=1)
        ]

        current_user_rank = None
        if current_user_id is not None:
            current_user_rank = await self._rank_of(current_user_id, since)

        logger.debug(f"Leaderboard {period.value}: {len(entries)} entries, caller rank {current_user_rank}")
        return Leaderboard(period=period, entries=entries, current_user_rank=current_user_rank)

    async def _lifetime_totals(self, user_ids: list[UUID]) -> dict[UUID, int]:
        if not user_ids:
            return {}
        result = await self.session.execute(
            self._window_totals(None).where(XPTransaction.user_id.in_(user_ids))
        )
        return {row.user_id: int(row.xp) for row in result.all()}

    async def _rank_of(self, user_id: UUID, since: datetime | None) -> int:
        """1 + number of users ordered ahead of ``user_id``.

        A caller with no XP in the window counts as 0 XP and ranks after
        everyone who earned any.
        """
        mine_query = select(func.sum(XPTransaction.amount)).where(XPTransaction.user_id == user_id)
        if since is not None:
            mine_query = mine_query.where(XPTransaction.occurred_at >= since)
        mine = int(await self.session.scalar(mine_query) or 0)

        totals = self._window_totals(since).subquery()
        ahead = await self.session.scalar(
            select(func.count())
            .select_from(totals)
            .where(
                or_(
                    totals.c.xp > mine,
                    and_(totals.c.xp == mine, totals.c.user_id < user_id),
                )
            )
        )
        return int(ahead or 0) + 1
