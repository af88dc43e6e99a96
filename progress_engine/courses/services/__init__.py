"""Services for course enrollment and progression."""

from .course_navigation_service import CourseNavigation, CourseNavigationService
from .enrollment_service import EnrollmentService
from .lesson_completion_service import LessonCompletionResult, LessonCompletionService


__all__ = [
    "CourseNavigation",
    "CourseNavigationService",
    "EnrollmentService",
    "LessonCompletionResult",
    "LessonCompletionService",
]
