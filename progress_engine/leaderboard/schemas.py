import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .service import LeaderboardPeriod


class LeaderboardEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    rank: int = Field(..., ge=1)
    xp: int = Field(..., description="XP earned in the requested window")
    level: int = Field(..., description="All-time level")
    is_current_user: bool = False


class LeaderboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: LeaderboardPeriod
    entries: list[LeaderboardEntryResponse]
    current_user_rank: int | None = Field(
        None, description="Caller's rank; callers without window XP rank after every earner"
    )


class ActivityDayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    count: int
    level: int = Field(0, ge=0, le=4, description="Heatmap intensity")


class ActivityCalendarResponse(BaseModel):
    """Per-day activity counts for one year, plus the Sunday-first week grid."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    days: list[ActivityDayResponse]
    weeks: list[list[ActivityDayResponse | None]]
    total_contributions: int
    active_days: int
    max_streak_within_year: int
