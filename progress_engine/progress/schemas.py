"""Pydantic schemas for content progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProgressUpdate(BaseModel):
    """Progress report for one piece of content."""

    progress_percentage: float = Field(
        ..., allow_inf_nan=False, description="Completion percentage; values outside 0-100 are clamped"
    )
    time_spent_delta_seconds: int = Field(
        default=0, ge=0, description="Seconds spent since the previous report; added to the running total"
    )
    last_position: str | None = Field(
        default=None, max_length=255, description="Opaque resume position (page, timestamp, anchor)"
    )


class ProgressResponse(BaseModel):
    """Stored progress for one piece of content."""

    model_config = ConfigDict(from_attributes=True)

    content_id: UUID
    progress_percentage: float
    last_position: str | None = None
    time_spent_seconds: int
    started_at: datetime | None = None
    last_viewed_at: datetime | None = None
    completed_at: datetime | None = None
    is_completed: bool = False
