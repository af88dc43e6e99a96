"""Course enrollment and progression API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter

from progress_engine.auth import CurrentAuth
from progress_engine.exceptions import NotEnrolledError

from .schemas import (
    CourseNavigationResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    LessonAccessResponse,
    LessonCompletionResponse,
)
from .services import CourseNavigationService, EnrollmentService, LessonCompletionService


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/courses",
    tags=["courses"],
    responses={404: {"description": "Not found"}},
)


@router.get("/enrollments")
async def list_enrollments(auth: CurrentAuth) -> EnrollmentListResponse:
    """List the caller's enrollments, newest first."""
    enrollments = await EnrollmentService(auth.session).list_enrollments(auth.user_id)
    return EnrollmentListResponse(
        enrollments=[EnrollmentResponse.model_validate(enrollment) for enrollment in enrollments]
    )


@router.post("/{course_id}/enroll")
async def enroll(course_id: UUID, auth: CurrentAuth) -> EnrollmentResponse:
    """Enroll in a course; enrolling again returns the existing enrollment."""
    enrollment = await EnrollmentService(auth.session).enroll(auth.user_id, course_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/{course_id}/enrollment")
async def get_enrollment(course_id: UUID, auth: CurrentAuth) -> EnrollmentResponse:
    """Course progress for the caller."""
    enrollment = await EnrollmentService(auth.session).get_enrollment(auth.user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError(str(course_id))
    return EnrollmentResponse.model_validate(enrollment)


@router.post("/{course_id}/lessons/{lesson_id}/complete")
async def complete_lesson(course_id: UUID, lesson_id: UUID, auth: CurrentAuth) -> LessonCompletionResponse:
    """Mark a lesson complete and report XP and completion milestones."""
    result = await LessonCompletionService(auth.session).complete_lesson(auth.user_id, course_id, lesson_id)
    return LessonCompletionResponse(
        enrollment=EnrollmentResponse.model_validate(result.enrollment),
        xp_awarded=result.xp_awarded,
        level_up=result.level_up,
        section_completed=result.section_completed,
        course_completed=result.course_completed,
    )


@router.get("/{course_id}/lessons/{lesson_id}/navigation")
async def get_course_navigation(course_id: UUID, lesson_id: UUID, auth: CurrentAuth) -> CourseNavigationResponse:
    """Previous and next lesson with the caller's sidebar state."""
    navigation = await CourseNavigationService(auth.session).get_course_navigation(
        course_id, lesson_id, user_id=auth.user_id
    )
    return CourseNavigationResponse.model_validate(navigation)


@router.get("/{course_id}/lessons/{lesson_id}/access")
async def get_lesson_access(course_id: UUID, lesson_id: UUID, auth: CurrentAuth) -> LessonAccessResponse:
    """Whether the caller may view the lesson."""
    allowed = await CourseNavigationService(auth.session).can_view_lesson(auth.user_id, course_id, lesson_id)
    return LessonAccessResponse(lesson_id=lesson_id, can_view=allowed)
