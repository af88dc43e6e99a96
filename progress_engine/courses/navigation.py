"""Previous/next lesson resolution and the lesson access rule."""

from dataclasses import dataclass
from uuid import UUID

from progress_engine.catalog.structure import CourseStructure, LessonRef
from progress_engine.exceptions import ResourceNotFoundError

from .state import EnrollmentState


@dataclass(frozen=True, slots=True)
class Neighbours:
    previous_lesson: LessonRef | None
    next_lesson: LessonRef | None


def resolve_neighbours(structure: CourseStructure, lesson_id: UUID) -> Neighbours:
    """Lessons either side of ``lesson_id`` in flattened section/lesson order.

    Raises
    ------
        ResourceNotFoundError: If the lesson is not part of the course
    """
    lessons = structure.flattened_lessons()
    try:
        index = structure.index_of(lesson_id)
    except KeyError as e:
        raise ResourceNotFoundError("Lesson", str(lesson_id)) from e

    return Neighbours(
        previous_lesson=lessons[index - 1] if index > 0 else None,
        next_lesson=lessons[index + 1] if index + 1 < len(lessons) else None,
    )


def can_view_lesson(lesson: LessonRef, state: EnrollmentState) -> bool:
    """Free lessons are open to everyone; the rest need an enrollment."""
    return lesson.is_free or state is not EnrollmentState.NOT_ENROLLED
