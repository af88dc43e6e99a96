"""Post-commit side-effect dispatch.

Streak and XP updates are best effort. Each handler runs in its own unit of
work after the triggering write has committed, and a failing handler is
logged and skipped so the caller's primary result still stands.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.leaderboard.activity import ActivityService
from progress_engine.streaks.service import StreakService
from progress_engine.xp.service import XPService

from .types import ActivityOccurred, Event, XPAwardRequested


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchOutcome:
    """What the XP handlers actually applied."""

    xp_awarded: int = 0
    level_up: bool = False
    failures: int = 0


Handler = Callable[[Event, DispatchOutcome], Awaitable[None]]


class SideEffectDispatcher:
    """Runs activity-log, streak and XP handlers for committed events."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout
        self._handlers: dict[type, list[Handler]] = {
            ActivityOccurred: [self._log_activity, self._record_streak],
            XPAwardRequested: [self._award_xp],
        }

    async def dispatch(self, events: Iterable[Event]) -> DispatchOutcome:
        outcome = DispatchOutcome()
        for event in events:
            handlers = self._handlers.get(type(event))
            if not handlers:
                logger.warning(f"No handler for event {type(event).__name__}")
                continue
            for handler in handlers:
                try:
                    await handler(event, outcome)
                except Exception:
                    outcome.failures += 1
                    logger.exception(
                        f"Side effect {handler.__name__} failed for user {event.user_id}",
                        extra={"event": repr(event)},
                    )
        return outcome

    async def _log_activity(self, event: ActivityOccurred, _outcome: DispatchOutcome) -> None:
        await ActivityService(self.session, self.timeout).record_event(
            user_id=event.user_id,
            day=event.day,
            kind=event.kind,
            reference_id=event.reference_id,
        )

    async def _record_streak(self, event: ActivityOccurred, _outcome: DispatchOutcome) -> None:
        await StreakService(self.session, self.timeout).record_activity(event.user_id, event.day)

    async def _award_xp(self, event: XPAwardRequested, outcome: DispatchOutcome) -> None:
        result = await XPService(self.session, timeout=self.timeout).award_xp(
            user_id=event.user_id,
            amount=event.amount,
            reason=event.reason,
            reference_id=event.reference_id,
            description=event.description,
        )
        outcome.xp_awarded += result.xp_awarded
        outcome.level_up = outcome.level_up or result.level_up
