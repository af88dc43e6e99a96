"""Pydantic schemas for enrollment and course progression."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EnrollmentResponse(BaseModel):
    """A user's enrollment in a course."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Enrollment ID")
    course_id: UUID = Field(..., description="Course ID")
    progress_percentage: int = Field(..., ge=0, le=100, description="Completed lessons as a rounded percentage")
    current_lesson_id: UUID | None = Field(None, description="Lesson to resume from")
    enrolled_at: datetime = Field(..., description="When the user enrolled")
    completed_at: datetime | None = Field(None, description="When the course was completed")


class EnrollmentListResponse(BaseModel):
    enrollments: list[EnrollmentResponse] = Field(default_factory=list)


class LessonCompletionResponse(BaseModel):
    """Outcome of marking a lesson complete."""

    enrollment: EnrollmentResponse
    xp_awarded: int = Field(0, description="XP actually applied by this completion")
    level_up: bool = Field(default=False, description="Whether any award raised the user's level")
    section_completed: bool = Field(default=False, description="This completion finished the lesson's section")
    course_completed: bool = Field(default=False, description="This completion finished the course")


class LessonLink(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    section_id: UUID


class NavigationLesson(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    order: int
    is_free: bool
    is_completed: bool


class NavigationSection(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    order: int
    lessons: list[NavigationLesson]
    is_completed: bool


class CourseNavigationResponse(BaseModel):
    """Previous/next lesson plus the sidebar tree."""

    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    lesson_id: UUID
    previous_lesson: LessonLink | None = None
    next_lesson: LessonLink | None = None
    sections: list[NavigationSection] = Field(default_factory=list)
    completed_lessons: int = 0
    total_lessons: int = 0
    progress_percentage: int = 0


class LessonAccessResponse(BaseModel):
    lesson_id: UUID
    can_view: bool
