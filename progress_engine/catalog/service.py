"""Catalog reads used by the progression engine."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.exceptions import ResourceNotFoundError

from .models import Course, CourseSection, Lesson
from .structure import CourseStructure, LessonRef, SectionRef


logger = logging.getLogger(__name__)


class CatalogService:
    """Read-only access to course structure."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_course_structure(self, course_id: UUID) -> CourseStructure:
        """Return the course's sections and lessons in catalog order.

        Raises
        ------
            ResourceNotFoundError: If the course does not exist
        """
        course = await self.session.get(Course, course_id)
        if course is None:
            raise ResourceNotFoundError("Course", str(course_id))

        sections_result = await self.session.execute(
            select(CourseSection).where(CourseSection.course_id == course_id)
        )
        sections = sections_result.scalars().all()

        lessons_by_section: dict[UUID, list[LessonRef]] = {section.id: [] for section in sections}
        if sections:
            lessons_result = await self.session.execute(
                select(Lesson).where(Lesson.section_id.in_(lessons_by_section.keys()))
            )
            for lesson in lessons_result.scalars().all():
                lessons_by_section[lesson.section_id].append(
                    LessonRef(
                        id=lesson.id,
                        section_id=lesson.section_id,
                        title=lesson.title,
                        order=lesson.order,
                        is_free=lesson.is_free,
                    )
                )

        structure = CourseStructure.build(
            course_id=course.id,
            title=course.title,
            sections=(
                SectionRef(
                    id=section.id,
                    title=section.title,
                    order=section.order,
                    lessons=tuple(lessons_by_section[section.id]),
                )
                for section in sections
            ),
        )
        logger.debug(
            f"Loaded structure for course {course_id}: {len(structure.sections)} sections, "
            f"{structure.total_lessons} lessons"
        )
        return structure
