"""XP & leveling ledger."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.config.settings import get_settings
from progress_engine.database import Paginator, unit_of_work
from progress_engine.exceptions import ConflictError, ValidationError

from .levels import LevelCurve
from .models import XPReason, XPTransaction


logger = logging.getLogger(__name__)


def award_lock_key(user_id: UUID) -> int:
    """Signed 64-bit advisory lock key for a user's XP awards."""
    return int.from_bytes(user_id.bytes[:8], "big", signed=True)


@dataclass(frozen=True, slots=True)
class XPAwardResult:
    xp_awarded: int
    total_xp: int
    level: int
    level_up: bool


@dataclass(frozen=True, slots=True)
class XPSummary:
    total_xp: int
    level: int
    xp_to_next_level: int
    progress_to_next_level: float
    weekly_xp: int
    monthly_xp: int


class XPService:
    """Appends XP awards and derives totals and levels from the log."""

    def __init__(self, session: AsyncSession, curve: LevelCurve | None = None, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout
        self.curve = curve or LevelCurve.from_settings()

    async def award_xp(
        self,
        user_id: UUID,
        amount: int,
        reason: XPReason | str,
        occurred_at: datetime | None = None,
        reference_id: UUID | None = None,
        description: str | None = None,
    ) -> XPAwardResult:
        """Append one award and report whether it raised the user's level.

        An award carrying a ``reference_id`` already recorded for the same
        user and reason is a no-op and reports ``xp_awarded=0``.
        """
        if amount <= 0:
            msg = f"XP amount must be positive, got {amount}"
            raise ValidationError(msg)

        reason_value = reason.value if isinstance(reason, XPReason) else reason
        occurred_at = occurred_at or datetime.now(UTC)

        try:
            async with unit_of_work(self.session, self.timeout):
                await self._lock_awards(user_id)
                if reference_id is not None and await self._already_awarded(user_id, reason_value, reference_id):
                    logger.debug(f"Skipping duplicate {reason_value} award for user {user_id} ({reference_id})")
                    return await self._unchanged(user_id)

                total_before = await self.total_xp(user_id)
                self.session.add(
                    XPTransaction(
                        user_id=user_id,
                        amount=amount,
                        reason=reason_value,
                        reference_id=reference_id,
                        description=description,
                        occurred_at=occurred_at,
                    )
                )
        except ConflictError:
            if reference_id is None:
                raise
            logger.info(f"Concurrent duplicate {reason_value} award for user {user_id} ({reference_id})")
            return await self._unchanged(user_id)

        total_after = total_before + amount
        level_before = self.curve.level_for(total_before)
        level_after = self.curve.level_for(total_after)
        if level_after > level_before:
            logger.info(f"User {user_id} reached level {level_after}")

        return XPAwardResult(
            xp_awarded=amount,
            total_xp=total_after,
            level=level_after,
            level_up=level_after > level_before,
        )

    def _uses_advisory_locks(self) -> bool:
        return self.session.get_bind().dialect.name == "postgresql"

    async def _lock_awards(self, user_id: UUID) -> None:
        """Serialize awards per user until commit.

        Keeps ``total_before`` exact and makes a concurrent duplicate wait for
        the first award, then see it in the dedupe check.

        SQLite allows one writer at a time, so only PostgreSQL needs the lock.
        """
        if not self._uses_advisory_locks():
            return
        await self.session.execute(select(func.pg_advisory_xact_lock(award_lock_key(user_id))))

    async def _already_awarded(self, user_id: UUID, reason: str, reference_id: UUID) -> bool:
        existing = await self.session.scalar(
            select(XPTransaction.id).where(
                XPTransaction.user_id == user_id,
                XPTransaction.reason == reason,
                XPTransaction.reference_id == reference_id,
            )
        )
        return existing is not None

    async def _unchanged(self, user_id: UUID) -> XPAwardResult:
        total = await self.total_xp(user_id)
        return XPAwardResult(xp_awarded=0, total_xp=total, level=self.curve.level_for(total), level_up=False)

    async def total_xp(self, user_id: UUID, since: datetime | None = None) -> int:
        """Sum of the user's awards, optionally only those at or after ``since``."""
        query = select(func.coalesce(func.sum(XPTransaction.amount), 0)).where(XPTransaction.user_id == user_id)
        if since is not None:
            query = query.where(XPTransaction.occurred_at >= since)
        return int(await self.session.scalar(query) or 0)

    async def get_xp_summary(self, user_id: UUID, now: datetime | None = None) -> XPSummary:
        """Totals recomputed from the log on every read."""
        settings = get_settings()
        now = now or datetime.now(UTC)

        total = await self.total_xp(user_id)
        weekly = await self.total_xp(user_id, since=now - timedelta(days=settings.WEEKLY_WINDOW_DAYS))
        monthly = await self.total_xp(user_id, since=now - timedelta(days=settings.MONTHLY_WINDOW_DAYS))

        return XPSummary(
            total_xp=total,
            level=self.curve.level_for(total),
            xp_to_next_level=self.curve.xp_to_next_level(total),
            progress_to_next_level=self.curve.progress_to_next_level(total),
            weekly_xp=weekly,
            monthly_xp=monthly,
        )

    async def get_history(self, user_id: UUID, page: int = 1, limit: int = 20) -> tuple[list[XPTransaction], int]:
        """Awards newest first, one page at a time."""
        query = (
            select(XPTransaction)
            .where(XPTransaction.user_id == user_id)
            .order_by(XPTransaction.occurred_at.desc(), XPTransaction.id.desc())
        )
        return await Paginator(page=page, limit=limit).paginate(self.session, query)
