"""Enrollment lifecycle: enroll, read and list."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.catalog import CatalogService
from progress_engine.courses.models import CourseEnrollment
from progress_engine.database import unit_of_work
from progress_engine.exceptions import ConflictError


logger = logging.getLogger(__name__)


class EnrollmentService:
    """Creates and reads ``CourseEnrollment`` rows."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout
        self.catalog = CatalogService(session)

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> CourseEnrollment | None:
        result = await self.session.execute(
            select(CourseEnrollment).where(
                CourseEnrollment.user_id == user_id,
                CourseEnrollment.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_enrollments(self, user_id: UUID) -> list[CourseEnrollment]:
        result = await self.session.execute(
            select(CourseEnrollment)
            .where(CourseEnrollment.user_id == user_id)
            .order_by(CourseEnrollment.enrolled_at.desc(), CourseEnrollment.id)
        )
        return list(result.scalars().all())

    async def enroll(self, user_id: UUID, course_id: UUID) -> CourseEnrollment:
        """Enroll the user, or return the existing enrollment untouched.

        A new enrollment points at the first lesson of the first section, or at
        nothing when the course has no lessons yet.

        Raises
        ------
            ResourceNotFoundError: If the course does not exist
        """
        structure = await self.catalog.get_course_structure(course_id)

        existing = await self.get_enrollment(user_id, course_id)
        if existing is not None:
            logger.debug(f"User {user_id} already enrolled in course {course_id}")
            return existing

        first_lesson = structure.first_lesson
        try:
            async with unit_of_work(self.session, self.timeout):
                enrollment = CourseEnrollment(
                    user_id=user_id,
                    course_id=course_id,
                    progress_percentage=0,
                    current_lesson_id=first_lesson.id if first_lesson else None,
                )
                self.session.add(enrollment)
        except ConflictError:
            # Lost an enroll race; the winner's row is the enrollment
            enrollment = await self.get_enrollment(user_id, course_id)
            if enrollment is None:
                raise
            return enrollment

        logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment
