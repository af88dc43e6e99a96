"""Lesson completion: the write path of course progression."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progress_engine.catalog import CatalogService, CourseStructure
from progress_engine.config.settings import get_settings
from progress_engine.courses.models import CourseEnrollment, LessonProgress
from progress_engine.courses.navigation import resolve_neighbours
from progress_engine.courses.queries import completed_lesson_ids
from progress_engine.courses.state import (
    EnrollmentState,
    advance_enrollment,
    can_complete,
    completion_percentage,
    enrollment_state,
    lesson_state,
    require_enrollment,
)
from progress_engine.database import unit_of_work
from progress_engine.events import ActivityOccurred, Event, SideEffectDispatcher, XPAwardRequested
from progress_engine.exceptions import ResourceNotFoundError
from progress_engine.streaks.clock import activity_day
from progress_engine.xp.models import XPReason


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LessonCompletionResult:
    enrollment: CourseEnrollment
    xp_awarded: int = 0
    level_up: bool = False
    section_completed: bool = False
    course_completed: bool = False


@dataclass(frozen=True, slots=True)
class _Transition:
    enrollment: CourseEnrollment
    applied: bool
    section_id: UUID | None = None
    section_completed: bool = False
    course_completed: bool = False


class LessonCompletionService:
    """Marks lessons complete and keeps the enrollment's derived state in step."""

    def __init__(self, session: AsyncSession, timeout: float | None = None) -> None:
        self.session = session
        self.timeout = timeout
        self.catalog = CatalogService(session)

    async def complete_lesson(self, user_id: UUID, course_id: UUID, lesson_id: UUID) -> LessonCompletionResult:
        """Mark ``lesson_id`` complete for the user.

        Completing an already completed lesson returns the enrollment as it is
        with every flag false. Its XP awards are dispatched again so any that
        an earlier dispatch failed to apply land now; the rest dedupe to zero.

        Raises
        ------
            ResourceNotFoundError: Unknown course, or lesson not in the course
            NotEnrolledError: The user has no enrollment for the course
        """
        structure = await self.catalog.get_course_structure(course_id)
        if not structure.contains(lesson_id):
            raise ResourceNotFoundError("Lesson", str(lesson_id))

        transition = await self._transition(user_id, structure, lesson_id)
        self.session.expunge(transition.enrollment)

        if not transition.applied:
            # Replays awards a failed earlier dispatch may have lost; reference
            # dedupe keeps this at zero XP when they were applied
            logger.debug(f"Lesson {lesson_id} already completed by user {user_id}, replaying awards")
            replay = await SideEffectDispatcher(self.session, self.timeout).dispatch(
                self._awards(user_id, course_id, lesson_id, transition)
            )
            return LessonCompletionResult(
                enrollment=transition.enrollment, xp_awarded=replay.xp_awarded, level_up=replay.level_up
            )

        logger.info(
            f"User {user_id} completed lesson {lesson_id} in course {course_id} "
            f"({transition.enrollment.progress_percentage}%)"
        )

        outcome = await SideEffectDispatcher(self.session, self.timeout).dispatch(
            self._events(user_id, course_id, lesson_id, transition)
        )

        return LessonCompletionResult(
            enrollment=transition.enrollment,
            xp_awarded=outcome.xp_awarded,
            level_up=outcome.level_up,
            section_completed=transition.section_completed,
            course_completed=transition.course_completed,
        )

    async def _transition(self, user_id: UUID, structure: CourseStructure, lesson_id: UUID) -> _Transition:
        now = datetime.now(UTC)

        async with unit_of_work(self.session, self.timeout):
            # Serializes concurrent completions for the same user and course
            enrollment = (
                await self.session.execute(
                    select(CourseEnrollment)
                    .where(
                        CourseEnrollment.user_id == user_id,
                        CourseEnrollment.course_id == structure.course_id,
                    )
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
            ).scalar_one_or_none()
            state = enrollment_state(enrollment)
            require_enrollment(state, structure.course_id)

            progress = (
                await self.session.execute(
                    select(LessonProgress)
                    .where(LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
            ).scalar_one_or_none()
            section = structure.section_of(lesson_id)
            if not can_complete(lesson_state(progress)):
                completed_ids = await completed_lesson_ids(self.session, user_id, structure.lesson_ids)
                return _Transition(
                    enrollment=enrollment,
                    applied=False,
                    section_id=section.id,
                    section_completed=section.lesson_ids <= completed_ids,
                    course_completed=state is EnrollmentState.COMPLETED,
                )

            if progress is None:
                progress = LessonProgress(user_id=user_id, lesson_id=lesson_id)
                self.session.add(progress)
            progress.completed = True
            progress.completed_at = now

            completed_ids = await completed_lesson_ids(self.session, user_id, structure.lesson_ids)

            percentage = completion_percentage(len(completed_ids), structure.total_lessons)
            if state is EnrollmentState.COMPLETED:
                percentage = max(percentage, enrollment.progress_percentage)
            _, course_completed = advance_enrollment(state, percentage)

            neighbours = resolve_neighbours(structure, lesson_id)

            enrollment.progress_percentage = percentage
            enrollment.current_lesson_id = neighbours.next_lesson.id if neighbours.next_lesson else lesson_id
            if course_completed:
                enrollment.completed_at = now
                logger.info(f"User {user_id} completed course {structure.course_id}")

        return _Transition(
            enrollment=enrollment,
            applied=True,
            section_id=section.id,
            section_completed=section.lesson_ids <= completed_ids,
            course_completed=course_completed,
        )

    def _events(self, user_id: UUID, course_id: UUID, lesson_id: UUID, transition: _Transition) -> list[Event]:
        activity = ActivityOccurred(
            user_id=user_id, day=activity_day(), kind="lesson_completed", reference_id=lesson_id
        )
        return [activity, *self._awards(user_id, course_id, lesson_id, transition)]

    def _awards(self, user_id: UUID, course_id: UUID, lesson_id: UUID, transition: _Transition) -> list[Event]:
        """Lesson award plus the section and course bonuses the transition earned."""
        settings = get_settings()
        events: list[Event] = [
            XPAwardRequested(
                user_id=user_id,
                amount=settings.XP_LESSON_COMPLETED,
                reason=XPReason.LESSON_COMPLETED,
                reference_id=lesson_id,
                description="Completed lesson",
            ),
        ]
        if transition.section_completed:
            events.append(
                XPAwardRequested(
                    user_id=user_id,
                    amount=settings.XP_SECTION_COMPLETED,
                    reason=XPReason.SECTION_COMPLETED,
                    reference_id=transition.section_id,
                    description="Completed section",
                )
            )
        if transition.course_completed:
            events.append(
                XPAwardRequested(
                    user_id=user_id,
                    amount=settings.XP_COURSE_COMPLETED,
                    reason=XPReason.COURSE_COMPLETED,
                    reference_id=course_id,
                    description="Completed course",
                )
            )
        return events
