"""Leaderboard and activity calendar API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from progress_engine.auth import CurrentAuth
from progress_engine.config.settings import get_settings
from progress_engine.streaks.clock import activity_day

from .activity import ActivityService
from .schemas import ActivityCalendarResponse, LeaderboardResponse
from .service import LeaderboardPeriod, LeaderboardService


router = APIRouter(prefix="/api/v1", tags=["leaderboard"])


@router.get("/leaderboard")
async def get_leaderboard(
    auth: CurrentAuth,
    period: LeaderboardPeriod = LeaderboardPeriod.ALL_TIME,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> LeaderboardResponse:
    """Top users by XP in the window, plus the caller's own rank."""
    leaderboard = await LeaderboardService(auth.session).get_leaderboard(
        period=period,
        limit=limit or get_settings().LEADERBOARD_DEFAULT_LIMIT,
        current_user_id=auth.user_id,
    )
    return LeaderboardResponse.model_validate(leaderboard)


@router.get("/activity/calendar")
async def get_activity_calendar(
    auth: CurrentAuth,
    year: int | None = None,
) -> ActivityCalendarResponse:
    """Activity heatmap data for one calendar year (default: the current year)."""
    calendar = await ActivityService(auth.session).get_activity_calendar(
        auth.user_id, year or activity_day().year
    )
    return ActivityCalendarResponse.model_validate(calendar)
