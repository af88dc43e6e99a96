import uuid

import pytest

from progress_engine.catalog.structure import CourseStructure, LessonRef, SectionRef
from progress_engine.courses.navigation import can_view_lesson, resolve_neighbours
from progress_engine.courses.state import EnrollmentState
from progress_engine.exceptions import ResourceNotFoundError


def _lesson(section_id: uuid.UUID, order: int, *, is_free: bool = False) -> LessonRef:
    return LessonRef(id=uuid.uuid4(), section_id=section_id, title=f"L{order}", order=order, is_free=is_free)


@pytest.fixture
def structure() -> CourseStructure:
    first, second = uuid.uuid4(), uuid.uuid4()
    first_lessons = (_lesson(first, 2), _lesson(first, 1, is_free=True))
    second_lessons = (_lesson(second, 1),)
    # Sections deliberately supplied out of order
    return CourseStructure.build(
        course_id=uuid.uuid4(),
        title="Course",
        sections=[
            SectionRef(id=second, title="Second", order=2, lessons=second_lessons),
            SectionRef(id=first, title="First", order=1, lessons=first_lessons),
        ],
    )


def test_build_orders_sections_and_lessons(structure: CourseStructure) -> None:
    assert [section.title for section in structure.sections] == ["First", "Second"]
    assert [(lesson.section_id, lesson.order) for lesson in structure.flattened_lessons()] == [
        (structure.sections[0].id, 1),
        (structure.sections[0].id, 2),
        (structure.sections[1].id, 1),
    ]
    assert structure.total_lessons == 3
    assert structure.first_lesson == structure.flattened_lessons()[0]


def test_neighbours_at_each_position(structure: CourseStructure) -> None:
    first, middle, last = structure.flattened_lessons()

    at_first = resolve_neighbours(structure, first.id)
    assert at_first.previous_lesson is None
    assert at_first.next_lesson == middle

    # Crossing a section boundary
    at_middle = resolve_neighbours(structure, middle.id)
    assert at_middle.previous_lesson == first
    assert at_middle.next_lesson == last

    at_last = resolve_neighbours(structure, last.id)
    assert at_last.previous_lesson == middle
    assert at_last.next_lesson is None


def test_unknown_lesson_is_not_found(structure: CourseStructure) -> None:
    with pytest.raises(ResourceNotFoundError):
        resolve_neighbours(structure, uuid.uuid4())


def test_section_of(structure: CourseStructure) -> None:
    last = structure.flattened_lessons()[-1]
    assert structure.section_of(last.id).title == "Second"
    with pytest.raises(KeyError):
        structure.section_of(uuid.uuid4())


def test_empty_course() -> None:
    empty = CourseStructure.build(course_id=uuid.uuid4(), title="Empty", sections=[])
    assert empty.first_lesson is None
    assert empty.total_lessons == 0


def test_access_rule(structure: CourseStructure) -> None:
    free, paid, _ = structure.flattened_lessons()
    assert free.is_free

    assert can_view_lesson(free, EnrollmentState.NOT_ENROLLED)
    assert not can_view_lesson(paid, EnrollmentState.NOT_ENROLLED)
    assert can_view_lesson(paid, EnrollmentState.ENROLLED)
    assert can_view_lesson(paid, EnrollmentState.COMPLETED)
