"""Immutable view of a course's ordered structure.

Everything here is pure: navigation, completion checks and the flattened
lesson order are all derived from the ``CourseStructure`` value returned by
the catalog, so they can be recomputed per request without touching the store.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True, slots=True)
class LessonRef:
    id: UUID
    section_id: UUID
    title: str
    order: int
    is_free: bool = False


@dataclass(frozen=True, slots=True)
class SectionRef:
    id: UUID
    title: str
    order: int
    lessons: tuple[LessonRef, ...] = ()

    @property
    def lesson_ids(self) -> frozenset[UUID]:
        return frozenset(lesson.id for lesson in self.lessons)


@dataclass(frozen=True, slots=True)
class CourseStructure:
    """Sections ascending by ``order``, lessons ascending by ``order`` within each section."""

    course_id: UUID
    title: str
    sections: tuple[SectionRef, ...] = ()
    _index: dict[UUID, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for position, lesson in enumerate(self.flattened_lessons()):
            self._index[lesson.id] = position

    @classmethod
    def build(cls, course_id: UUID, title: str, sections: Iterable[SectionRef]) -> CourseStructure:
        """Sort sections and lessons into catalog order (``order``, then id for ties)."""
        ordered = tuple(
            SectionRef(
                id=section.id,
                title=section.title,
                order=section.order,
                lessons=tuple(sorted(section.lessons, key=lambda lesson: (lesson.order, str(lesson.id)))),
            )
            for section in sorted(sections, key=lambda section: (section.order, str(section.id)))
        )
        return cls(course_id=course_id, title=title, sections=ordered)

    def flattened_lessons(self) -> list[LessonRef]:
        return [lesson for section in self.sections for lesson in section.lessons]

    @property
    def lesson_ids(self) -> list[UUID]:
        return [lesson.id for lesson in self.flattened_lessons()]

    @property
    def total_lessons(self) -> int:
        return len(self._index)

    @property
    def first_lesson(self) -> LessonRef | None:
        lessons = self.flattened_lessons()
        return lessons[0] if lessons else None

    def contains(self, lesson_id: UUID) -> bool:
        return lesson_id in self._index

    def index_of(self, lesson_id: UUID) -> int:
        """Position of ``lesson_id`` in the flattened order; ``KeyError`` if absent."""
        return self._index[lesson_id]

    def lesson(self, lesson_id: UUID) -> LessonRef:
        return self.flattened_lessons()[self.index_of(lesson_id)]

    def section_of(self, lesson_id: UUID) -> SectionRef:
        for section in self.sections:
            if lesson_id in section.lesson_ids:
                return section
        raise KeyError(lesson_id)
