"""Database model for per-content progress."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from progress_engine.database.base import Base


class ContentProgress(Base):
    """How far a user is through one piece of content."""

    __tablename__ = "content_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "content_id", name="uq_content_progress_user_content"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_content_progress_percentage_range",
        ),
        CheckConstraint("time_spent_seconds >= 0", name="ck_content_progress_time_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    content_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    progress_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    last_viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return (
            f"<ContentProgress(user_id={self.user_id}, content_id={self.content_id}, "
            f"progress_percentage={self.progress_percentage})>"
        )
