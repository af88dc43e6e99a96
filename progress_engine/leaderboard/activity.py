"""Activity log writes and the per-year activity calendar."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.database import unit_of_work
from progress_engine.exceptions import ValidationError

from .calendar import ActivityCalendar, build_calendar
from .models import ActivityEvent


logger = logging.getLogger(__name__)

MIN_CALENDAR_YEAR = 1970
MAX_CALENDAR_YEAR = 9998


class ActivityService:
    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout

    async def record_event(
        self,
        user_id: UUID,
        day: date,
        kind: str,
        reference_id: UUID | None = None,
    ) -> None:
        async with unit_of_work(self.session, self.timeout):
            self.session.add(ActivityEvent(user_id=user_id, activity_day=day, kind=kind, reference_id=reference_id))

    async def daily_counts(self, user_id: UUID, start: date, end: date) -> dict[date, int]:
        """Events per day for ``start <= day <= end``; days without events are absent."""
        result = await self.session.execute(
            select(ActivityEvent.activity_day, func.count(ActivityEvent.id))
            .where(
                ActivityEvent.user_id == user_id,
                ActivityEvent.activity_day >= start,
                ActivityEvent.activity_day <= end,
            )
            .group_by(ActivityEvent.activity_day)
        )
        return {day: count for day, count in result.all()}

    async def get_activity_calendar(self, user_id: UUID, year: int) -> ActivityCalendar:
        if not MIN_CALENDAR_YEAR <= year <= MAX_CALENDAR_YEAR:
            msg = f"Year must be between {MIN_CALENDAR_YEAR} and {MAX_CALENDAR_YEAR}"
            raise ValidationError(msg)

        counts = await self.daily_counts(user_id, date(year, 1, 1), date(year, 12, 31))
        calendar = build_calendar(year, counts)
        logger.debug(f"Activity calendar {year} for user {user_id}: {calendar.active_days} active days")
        return calendar
