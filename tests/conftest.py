"""Shared fixtures: a fresh in-memory SQLite database per test."""

import os


# Settings are cached on first use, so the environment must be in place before
# anything from progress_engine is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH_PROVIDER"] = "header"
os.environ.setdefault("ACTIVITY_TIMEZONE", "UTC")

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from progress_engine.catalog.models import Course, CourseSection, Lesson
from progress_engine.database.engine import create_app_engine
from progress_engine.database.init import drop_database, init_database
from progress_engine.database.session import get_db_session
from progress_engine.main import app


@pytest_asyncio.fixture
async def db_engine():
    engine = create_app_engine("sqlite+aiosqlite://")
    await init_database(engine)
    yield engine
    await drop_database(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def user_id() -> UUID:
    return UUID("11111111-1111-1111-1111-111111111111")


@pytest_asyncio.fixture
async def client_factory(
    db_session: AsyncSession, user_id: UUID
) -> AsyncGenerator[Callable[..., Awaitable[AsyncClient]], None]:
    """Build HTTP clients that act as a given user against the test database."""

    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = _session_override
    clients: list[AsyncClient] = []

    async def _factory(as_user: UUID | None = user_id) -> AsyncClient:
        headers = {"X-User-Id": str(as_user)} if as_user is not None else {}
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)
        clients.append(client)
        return client

    yield _factory

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


@dataclass
class SeededCourse:
    """Default layout: section 1 holds lessons 0 (free) and 1, section 2 holds lesson 2."""

    course_id: UUID
    section_ids: list[UUID]
    lesson_ids: list[UUID]


async def seed_course(
    session: AsyncSession,
    lessons_per_section: tuple[int, ...] = (2, 1),
    free_lessons: int = 1,
) -> SeededCourse:
    """Insert a course whose rows are added out of order to exercise catalog sorting."""
    course = Course(id=uuid.uuid4(), title="Python Basics", slug=f"python-basics-{uuid.uuid4().hex[:8]}")
    session.add(course)

    section_ids: list[UUID] = []
    lesson_ids: list[UUID] = []
    pending: list[Lesson] = []
    for section_order, lesson_count in enumerate(lessons_per_section, start=1):
        section = CourseSection(
            id=uuid.uuid4(), course_id=course.id, title=f"Section {section_order}", order=section_order
        )
        session.add(section)
        section_ids.append(section.id)
        for lesson_order in range(1, lesson_count + 1):
            lesson = Lesson(
                id=uuid.uuid4(),
                section_id=section.id,
                title=f"Lesson {section_order}.{lesson_order}",
                order=lesson_order,
                is_free=len(lesson_ids) < free_lessons,
            )
            lesson_ids.append(lesson.id)
            pending.append(lesson)

    session.add_all(reversed(pending))
    await session.commit()
    return SeededCourse(course_id=course.id, section_ids=section_ids, lesson_ids=lesson_ids)


@pytest.fixture
def course_factory(db_session: AsyncSession) -> Callable[..., Awaitable[SeededCourse]]:
    async def _factory(lessons_per_section: tuple[int, ...] = (2, 1), free_lessons: int = 1) -> SeededCourse:
        return await seed_course(db_session, lessons_per_section, free_lessons)

    return _factory


@pytest_asyncio.fixture
async def course(course_factory) -> SeededCourse:
    return await course_factory()
