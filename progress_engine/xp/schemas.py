from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class XPSummaryResponse(BaseModel):
    """Totals and level, recomputed from the award log."""

    model_config = ConfigDict(from_attributes=True)

    total_xp: int = Field(..., ge=0)
    level: int = Field(..., ge=1)
    xp_to_next_level: int = Field(..., ge=0, description="0 at the top of the level table")
    progress_to_next_level: float = Field(..., ge=0, le=100, description="Percent of the way to the next level")
    weekly_xp: int = Field(..., ge=0, description="XP earned in the trailing weekly window")
    monthly_xp: int = Field(..., ge=0, description="XP earned in the trailing monthly window")


class XPTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    amount: int
    reason: str
    reference_id: UUID | None = None
    description: str | None = None
    occurred_at: datetime


class XPHistoryResponse(BaseModel):
    items: list[XPTransactionResponse]
    total: int
    page: int
    limit: int
