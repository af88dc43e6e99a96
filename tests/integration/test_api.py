"""HTTP surface: routing, identity, schemas and the error envelope."""

import uuid
from uuid import UUID

import pytest

from progress_engine.auth.config import DEFAULT_USER_ID
from progress_engine.config.settings import get_settings


@pytest.mark.asyncio
async def test_health(client_factory) -> None:
    client = await client_factory(as_user=None)
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "database": "ok"}


@pytest.mark.asyncio
async def test_missing_identity_is_unauthorized(client_factory) -> None:
    client = await client_factory(as_user=None)
    resp = await client.get("/api/v1/streak")

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_malformed_identity_is_unauthorized(client_factory) -> None:
    client = await client_factory()
    resp = await client.get("/api/v1/streak", headers={"X-User-Id": "not-a-uuid"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_single_user_mode_uses_default_identity(client_factory, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "AUTH_PROVIDER", "none")
    client = await client_factory(as_user=None)
    content_id = uuid.uuid4()

    resp = await client.put(f"/api/v1/progress/{content_id}", json={"progress_percentage": 100})
    assert resp.status_code == 200

    board = (await client.get("/api/v1/leaderboard")).json()
    assert board["entries"][0]["user_id"] == str(DEFAULT_USER_ID)
    assert board["entries"][0]["is_current_user"] is True


@pytest.mark.asyncio
async def test_progress_endpoints(client_factory) -> None:
    client = await client_factory()
    content_id = uuid.uuid4()

    missing = await client.get(f"/api/v1/progress/{content_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["category"] == "RESOURCE_NOT_FOUND"

    resp = await client.put(
        f"/api/v1/progress/{content_id}",
        json={"progress_percentage": 55.5, "time_spent_delta_seconds": 120, "last_position": "02:13"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["progress_percentage"] == 55.5
    assert body["time_spent_seconds"] == 120
    assert body["last_position"] == "02:13"
    assert body["is_completed"] is False

    done = (await client.put(f"/api/v1/progress/{content_id}", json={"progress_percentage": 100})).json()
    assert done["is_completed"] is True

    lowered = (await client.get(f"/api/v1/progress/{content_id}")).json()
    assert lowered["progress_percentage"] == 100


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"progress_percentage": "lots"}, {"progress_percentage": 5, "time_spent_delta_seconds": -1}, {}],
)
async def test_progress_payload_validation(client_factory, payload: dict) -> None:
    client = await client_factory()
    resp = await client.put(f"/api/v1/progress/{uuid.uuid4()}", json=payload)

    assert resp.status_code == 422
    assert resp.json()["error"]["category"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_course_flow(client_factory, course) -> None:
    client = await client_factory()
    base = f"/api/v1/courses/{course.course_id}"
    l1, l2, l3 = course.lesson_ids

    not_enrolled = await client.post(f"{base}/lessons/{l1}/complete")
    assert not_enrolled.status_code == 403
    assert not_enrolled.json()["error"]["code"] == "NOT_ENROLLED"

    assert (await client.get(f"{base}/enrollment")).status_code == 403
    access = (await client.get(f"{base}/lessons/{l2}/access")).json()
    assert access == {"lesson_id": str(l2), "can_view": False}

    enrolled = (await client.post(f"{base}/enroll")).json()
    assert enrolled["current_lesson_id"] == str(l1)
    assert enrolled["progress_percentage"] == 0

    again = (await client.post(f"{base}/enroll")).json()
    assert again["id"] == enrolled["id"]

    completed = (await client.post(f"{base}/lessons/{l1}/complete")).json()
    assert completed["enrollment"]["progress_percentage"] == 33
    assert completed["enrollment"]["current_lesson_id"] == str(l2)
    assert completed["xp_awarded"] == 10
    assert completed["section_completed"] is False

    repeat = (await client.post(f"{base}/lessons/{l1}/complete")).json()
    assert repeat["xp_awarded"] == 0
    assert repeat["enrollment"]["progress_percentage"] == 33

    navigation = (await client.get(f"{base}/lessons/{l2}/navigation")).json()
    assert navigation["previous_lesson"]["id"] == str(l1)
    assert navigation["next_lesson"]["id"] == str(l3)
    assert navigation["sections"][0]["lessons"][0]["is_completed"] is True
    assert navigation["completed_lessons"] == 1
    assert navigation["total_lessons"] == 3

    enrollments = (await client.get("/api/v1/courses/enrollments")).json()["enrollments"]
    assert [item["course_id"] for item in enrollments] == [str(course.course_id)]

    assert (await client.get(f"{base}/lessons/{l2}/access")).json()["can_view"] is True


@pytest.mark.asyncio
async def test_unknown_course_and_lesson(client_factory, course) -> None:
    client = await client_factory()

    assert (await client.post(f"/api/v1/courses/{uuid.uuid4()}/enroll")).status_code == 404

    await client.post(f"/api/v1/courses/{course.course_id}/enroll")
    resp = await client.post(f"/api/v1/courses/{course.course_id}/lessons/{uuid.uuid4()}/complete")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_gamification_reads(client_factory, course) -> None:
    client = await client_factory()
    base = f"/api/v1/courses/{course.course_id}"
    await client.post(f"{base}/enroll")
    await client.post(f"{base}/lessons/{course.lesson_ids[0]}/complete")

    streak = (await client.get("/api/v1/streak")).json()
    assert streak["current_streak"] == 1
    assert streak["longest_streak"] == 1

    xp = (await client.get("/api/v1/xp")).json()
    assert xp["total_xp"] == 10
    assert xp["weekly_xp"] == 10
    assert xp["monthly_xp"] == 10
    assert xp["level"] == 1
    assert xp["xp_to_next_level"] == 190

    history = (await client.get("/api/v1/xp/history", params={"limit": 5})).json()
    assert history["total"] == 1
    assert history["items"][0]["reason"] == "lesson_completed"
    assert history["items"][0]["reference_id"] == str(course.lesson_ids[0])

    board = (await client.get("/api/v1/leaderboard", params={"period": "weekly", "limit": 10})).json()
    assert board["period"] == "weekly"
    assert board["current_user_rank"] == 1
    assert board["entries"][0]["xp"] == 10

    calendar = (await client.get("/api/v1/activity/calendar")).json()
    assert calendar["total_contributions"] == 1
    assert calendar["active_days"] == 1
    assert all(len(week) == 7 for week in calendar["weeks"])
    assert [day["level"] for day in calendar["days"] if day["count"]] == [1]


@pytest.mark.asyncio
async def test_leaderboard_rank_for_other_users(client_factory, course) -> None:
    leader = UUID(int=10)
    follower = UUID(int=20)
    leader_client = await client_factory(as_user=leader)
    follower_client = await client_factory(as_user=follower)
    base = f"/api/v1/courses/{course.course_id}"

    for client, lessons in ((leader_client, course.lesson_ids), (follower_client, course.lesson_ids[:1])):
        await client.post(f"{base}/enroll")
        for lesson_id in lessons:
            await client.post(f"{base}/lessons/{lesson_id}/complete")

    board = (await follower_client.get("/api/v1/leaderboard", params={"limit": 1})).json()
    assert [entry["user_id"] for entry in board["entries"]] == [str(leader)]
    assert board["current_user_rank"] == 2


@pytest.mark.asyncio
async def test_leaderboard_rejects_unknown_period(client_factory) -> None:
    client = await client_factory()
    resp = await client.get("/api/v1/leaderboard", params={"period": "yearly"})
    assert resp.status_code == 422
