"""Database model for daily-activity streaks."""

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from progress_engine.database.base import Base


class UserStreak(Base):
    """One row per user; ``last_active_on`` is a calendar day, never a timestamp."""

    __tablename__ = "user_streaks"
    __table_args__ = (
        CheckConstraint("current_streak >= 0", name="ck_user_streaks_current_non_negative"),
        CheckConstraint("longest_streak >= current_streak", name="ck_user_streaks_longest_ge_current"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_on: Mapped[date] = mapped_column(Date, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
