"""Business logic for content progress tracking."""

import logging
import math
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.config.settings import get_settings
from progress_engine.database import unit_of_work
from progress_engine.events import ActivityOccurred, Event, SideEffectDispatcher, XPAwardRequested
from progress_engine.exceptions import ConflictError, ValidationError
from progress_engine.streaks.clock import activity_day
from progress_engine.xp.models import XPReason

from .models import ContentProgress


logger = logging.getLogger(__name__)

COMPLETE_PERCENTAGE = 100.0


class ProgressService:
    """Tracks fractional completion and time spent per (user, content)."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout

    async def get_progress(self, user_id: UUID, content_id: UUID) -> ContentProgress | None:
        result = await self.session.execute(
            select(ContentProgress).where(
                ContentProgress.user_id == user_id,
                ContentProgress.content_id == content_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_progress(
        self,
        user_id: UUID,
        content_id: UUID,
        percent: float,
        time_spent_delta_seconds: int = 0,
        position: str | None = None,
    ) -> ContentProgress:
        """Record a progress report.

        ``percent`` is clamped to [0, 100]. Completion is sticky: once
        ``completed_at`` is set the stored percentage stays at 100 whatever
        later reports say. ``content_id`` is not checked against the catalog.

        Raises
        ------
            ValidationError: percent is NaN or the time delta is negative
        """
        if math.isnan(percent):
            msg = "progress_percentage must be a number"
            raise ValidationError(msg)
        percent = min(max(percent, 0.0), COMPLETE_PERCENTAGE)
        if time_spent_delta_seconds < 0:
            msg = f"time_spent_delta_seconds must not be negative, got {time_spent_delta_seconds}"
            raise ValidationError(msg)

        try:
            progress, newly_completed = await self._apply(
                user_id, content_id, percent, time_spent_delta_seconds, position
            )
        except ConflictError:
            # First report for this content raced another insert; the row exists now
            logger.info(f"Progress row for user {user_id}, content {content_id} created concurrently, retrying")
            progress, newly_completed = await self._apply(
                user_id, content_id, percent, time_spent_delta_seconds, position
            )

        # Keep the committed state readable whatever the side effects do to the session
        self.session.expunge(progress)

        logger.info(f"Updated progress for user {user_id}, content {content_id}: {progress.progress_percentage}%")
        if newly_completed:
            logger.info(f"User {user_id} completed content {content_id}")

        events: list[Event] = []
        if percent > 0:
            events.append(
                ActivityOccurred(user_id=user_id, day=activity_day(), kind="content_progress", reference_id=content_id)
            )
        # Sent on every report after completion; reference dedupe makes
        # repeats free and recovers an award a failed dispatch lost
        if progress.is_completed:
            events.append(
                XPAwardRequested(
                    user_id=user_id,
                    amount=get_settings().XP_CONTENT_COMPLETED,
                    reason=XPReason.CONTENT_COMPLETED,
                    reference_id=content_id,
                    description="Completed content",
                )
            )
        if events:
            await SideEffectDispatcher(self.session, self.timeout).dispatch(events)

        return progress

    async def _apply(
        self,
        user_id: UUID,
        content_id: UUID,
        percent: float,
        time_spent_delta_seconds: int,
        position: str | None,
    ) -> tuple[ContentProgress, bool]:
        now = datetime.now(UTC)
        newly_completed = False

        async with unit_of_work(self.session, self.timeout):
            result = await self.session.execute(
                select(ContentProgress)
                .where(
                    ContentProgress.user_id == user_id,
                    ContentProgress.content_id == content_id,
                )
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            progress = result.scalar_one_or_none()
            if progress is None:
                progress = ContentProgress(
                    user_id=user_id,
                    content_id=content_id,
                    progress_percentage=0.0,
                    time_spent_seconds=0,
                    started_at=now,
                )
                self.session.add(progress)

            if progress.completed_at is None:
                progress.progress_percentage = percent
                if percent >= COMPLETE_PERCENTAGE:
                    progress.completed_at = now
                    newly_completed = True
            else:
                progress.progress_percentage = COMPLETE_PERCENTAGE

            progress.time_spent_seconds += time_spent_delta_seconds
            progress.last_viewed_at = now
            if position is not None:
                progress.last_position = position

        return progress, newly_completed
