"""Daily-activity streak ledger."""

from progress_engine.streaks.models import UserStreak
from progress_engine.streaks.router import router
from progress_engine.streaks.service import StreakService, StreakSnapshot, advance_streak


__all__ = ["StreakService", "StreakSnapshot", "UserStreak", "advance_streak", "router"]
