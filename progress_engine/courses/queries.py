"""Shared read queries for course progression."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import LessonProgress


async def completed_lesson_ids(session: AsyncSession, user_id: UUID, lesson_ids: Sequence[UUID]) -> set[UUID]:
    """Which of ``lesson_ids`` the user has completed."""
    if not lesson_ids:
        return set()
    result = await session.execute(
        select(LessonProgress.lesson_id).where(
            LessonProgress.user_id == user_id,
            LessonProgress.completed.is_(True),
            LessonProgress.lesson_id.in_(lesson_ids),
        )
    )
    return set(result.scalars().all())
