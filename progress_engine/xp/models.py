"""Database model for the XP award log."""

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from progress_engine.database.base import Base


class XPReason(str, Enum):
    """Why XP was awarded."""

    LESSON_COMPLETED = "lesson_completed"
    SECTION_COMPLETED = "section_completed"
    COURSE_COMPLETED = "course_completed"
    CONTENT_COMPLETED = "content_completed"


class XPTransaction(Base):
    """Append-only XP log. Totals and windowed sums are computed from it."""

    __tablename__ = "xp_transactions"
    __table_args__ = (
        UniqueConstraint("user_id", "reason", "reference_id", name="uq_xp_user_reason_reference"),
        CheckConstraint("amount > 0", name="ck_xp_amount_positive"),
        Index("ix_xp_transactions_user_occurred", "user_id", "occurred_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
