from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_streak: int = Field(..., ge=0, description="Consecutive active days ending on the last active day")
    longest_streak: int = Field(..., ge=0, description="Longest run ever recorded")
    last_active_on: date | None = Field(None, description="Most recent active calendar day")
