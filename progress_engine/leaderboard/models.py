"""Database model for the per-event activity log."""

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from progress_engine.database.base import Base


class ActivityEvent(Base):
    """One qualifying learning event; the calendar counts these per day."""

    __tablename__ = "activity_events"
    __table_args__ = (Index("ix_activity_events_user_day", "user_id", "activity_day"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    activity_day: Mapped[date] = mapped_column(Date, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
