"""Read side of course progression: navigation, sidebar state and access."""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.catalog import CatalogService, LessonRef
from progress_engine.courses.navigation import can_view_lesson, resolve_neighbours
from progress_engine.courses.queries import completed_lesson_ids
from progress_engine.courses.services.enrollment_service import EnrollmentService
from progress_engine.courses.state import enrollment_state
from progress_engine.exceptions import ResourceNotFoundError


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LessonView:
    id: UUID
    title: str
    order: int
    is_free: bool
    is_completed: bool


@dataclass(frozen=True, slots=True)
class SectionView:
    id: UUID
    title: str
    order: int
    lessons: list[LessonView]
    is_completed: bool


@dataclass(frozen=True, slots=True)
class CourseNavigation:
    course_id: UUID
    lesson_id: UUID
    previous_lesson: LessonRef | None
    next_lesson: LessonRef | None
    sections: list[SectionView]
    completed_lessons: int
    total_lessons: int
    progress_percentage: int


class CourseNavigationService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.catalog = CatalogService(session)
        self.enrollments = EnrollmentService(session)

    async def get_course_navigation(
        self,
        course_id: UUID,
        lesson_id: UUID,
        user_id: UUID | None = None,
    ) -> CourseNavigation:
        """Previous/next lesson plus the section tree with the user's completion flags.

        Raises
        ------
            ResourceNotFoundError: Unknown course, or lesson not in the course
        """
        structure = await self.catalog.get_course_structure(course_id)
        neighbours = resolve_neighbours(structure, lesson_id)

        completed: set[UUID] = set()
        percentage = 0
        if user_id is not None:
            completed = await completed_lesson_ids(self.session, user_id, structure.lesson_ids)
            enrollment = await self.enrollments.get_enrollment(user_id, course_id)
            if enrollment is not None:
                percentage = enrollment.progress_percentage

        sections = [
            SectionView(
                id=section.id,
                title=section.title,
                order=section.order,
                lessons=[
                    LessonView(
                        id=lesson.id,
                        title=lesson.title,
                        order=lesson.order,
                        is_free=lesson.is_free,
                        is_completed=lesson.id in completed,
                    )
                    for lesson in section.lessons
                ],
                is_completed=bool(section.lessons) and section.lesson_ids <= completed,
            )
            for section in structure.sections
        ]

        return CourseNavigation(
            course_id=course_id,
            lesson_id=lesson_id,
            previous_lesson=neighbours.previous_lesson,
            next_lesson=neighbours.next_lesson,
            sections=sections,
            completed_lessons=len(completed),
            total_lessons=structure.total_lessons,
            progress_percentage=percentage,
        )

    async def can_view_lesson(self, user_id: UUID, course_id: UUID, lesson_id: UUID) -> bool:
        """Raises ResourceNotFoundError for an unknown course or a lesson outside it."""
        structure = await self.catalog.get_course_structure(course_id)
        if not structure.contains(lesson_id):
            raise ResourceNotFoundError("Lesson", str(lesson_id))

        enrollment = await self.enrollments.get_enrollment(user_id, course_id)
        allowed = can_view_lesson(structure.lesson(lesson_id), enrollment_state(enrollment))
        if not allowed:
            logger.debug(f"User {user_id} may not view paid lesson {lesson_id}")
        return allowed
