"""XP API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from progress_engine.auth import CurrentAuth

from .schemas import XPHistoryResponse, XPSummaryResponse, XPTransactionResponse
from .service import XPService


router = APIRouter(prefix="/api/v1/xp", tags=["xp"])


@router.get("")
async def get_xp_summary(auth: CurrentAuth) -> XPSummaryResponse:
    """Total, weekly and monthly XP with the caller's level."""
    summary = await XPService(auth.session).get_xp_summary(auth.user_id)
    return XPSummaryResponse.model_validate(summary)


@router.get("/history")
async def get_xp_history(
    auth: CurrentAuth,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> XPHistoryResponse:
    """XP awards, newest first."""
    items, total = await XPService(auth.session).get_history(auth.user_id, page=page, limit=limit)
    return XPHistoryResponse(
        items=[XPTransactionResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )
