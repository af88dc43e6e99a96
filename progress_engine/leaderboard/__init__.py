"""Leaderboard and activity aggregation. Reads only, apart from the activity log."""

from progress_engine.leaderboard.activity import ActivityService
from progress_engine.leaderboard.calendar import ActivityCalendar, ActivityDay, build_calendar
from progress_engine.leaderboard.models import ActivityEvent
from progress_engine.leaderboard.service import (
    Leaderboard,
    LeaderboardEntry,
    LeaderboardPeriod,
    LeaderboardService,
)


__all__ = [
    "ActivityCalendar",
    "ActivityDay",
    "ActivityEvent",
    "ActivityService",
    "Leaderboard",
    "LeaderboardEntry",
    "LeaderboardPeriod",
    "LeaderboardService",
    "build_calendar",
]
