"""Streak API endpoints."""

from fastapi import APIRouter

from progress_engine.auth import CurrentAuth

from .schemas import StreakResponse
from .service import StreakService


router = APIRouter(prefix="/api/v1/streak", tags=["streaks"])


@router.get("")
async def get_streak(auth: CurrentAuth) -> StreakResponse:
    """Current and longest daily-activity streak for the caller."""
    snapshot = await StreakService(auth.session).get_streak(auth.user_id)
    return StreakResponse.model_validate(snapshot)
