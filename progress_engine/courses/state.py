"""Explicit course and lesson states with guarded transitions.

All "has this already happened?" decisions for progression live here, so the
services never re-derive idempotence from raw column checks.
"""

from enum import Enum

from progress_engine.exceptions import NotEnrolledError

from .models import CourseEnrollment, LessonProgress


class EnrollmentState(str, Enum):
    NOT_ENROLLED = "not_enrolled"
    ENROLLED = "enrolled"
    COMPLETED = "completed"


class LessonState(str, Enum):
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"


def enrollment_state(enrollment: CourseEnrollment | None) -> EnrollmentState:
    if enrollment is None:
        return EnrollmentState.NOT_ENROLLED
    if enrollment.completed_at is not None:
        return EnrollmentState.COMPLETED
    return EnrollmentState.ENROLLED


def lesson_state(progress: LessonProgress | None) -> LessonState:
    if progress is not None and progress.completed:
        return LessonState.COMPLETED
    return LessonState.INCOMPLETE


def require_enrollment(state: EnrollmentState, course_id: object) -> None:
    """Progression needs an enrollment row, whatever the lesson's free flag says."""
    if state is EnrollmentState.NOT_ENROLLED:
        raise NotEnrolledError(str(course_id))


def can_complete(state: LessonState) -> bool:
    """Incomplete -> Completed is the only lesson transition; Completed is terminal."""
    return state is LessonState.INCOMPLETE


def advance_enrollment(state: EnrollmentState, percentage: int) -> tuple[EnrollmentState, bool]:
    """State after a lesson completion and whether the course just became complete.

    A course that is already complete stays complete and never fires again.
    """
    if state is EnrollmentState.COMPLETED:
        return EnrollmentState.COMPLETED, False
    if percentage >= 100:
        return EnrollmentState.COMPLETED, True
    return EnrollmentState.ENROLLED, False


def completion_percentage(completed: int, total: int) -> int:
    """``round(100 * completed / total)`` with halves rounded up; 0 for an empty course."""
    if total <= 0:
        return 0
    completed = min(max(completed, 0), total)
    return (200 * completed + total) // (2 * total)
