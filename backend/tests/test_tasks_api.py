from __future__ import annotations

from datetime import date, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.deps import get_db
from app.db.models.activity import Activity
from app.db.models.goal import Goal
from app.db.models.user import User
from app.main import app
from app.services import plan_generator


@pytest.fixture()
def client(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(plan_generator, "_build_client", lambda: None)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _headers(user_id: UUID) -> dict:
    return {"X-User-Id": str(user_id)}


def _create_goal(client: TestClient, user_id: UUID, total_days: int = 5, goal_type: str = "habit") -> dict:
    response = client.post(
        "/goals",
        json={"type": goal_type, "title": "Morning mobility", "total_days": total_days, "daily_minutes": 30},
        headers=_headers(user_id),
    )
    assert response.status_code == 201
    return response.json()["goal"]


def _tasks(client: TestClient, user_id: UUID, goal_id: str) -> list:
    response = client.get(f"/tasks/goal/{goal_id}", headers=_headers(user_id))
    assert response.status_code == 200
    return response.json()["tasks"]


def _goal(client: TestClient, user_id: UUID, goal_id: str) -> dict:
    response = client.get(f"/goals/{goal_id}", headers=_headers(user_id))
    assert response.status_code == 200
    return response.json()["goal"]


def test_created_goal_has_one_scheduled_task_per_day(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)

    tasks = _tasks(test_client, user_id, goal["id"])

    assert [task["day_number"] for task in tasks] == [1, 2, 3, 4, 5]
    start = date.fromisoformat(goal["start_date"])
    assert [date.fromisoformat(task["scheduled_date"]) for task in tasks] == [start + timedelta(days=i) for i in range(5)]
    for task in tasks:
        assert task["status"] == "pending"
        assert len(task["action_items"]) >= 3
        assert len(task["deliverables"]) >= 2
        assert all(item["text"].endswith("min)") for item in task["action_items"])


def test_today_returns_lowest_pending_day(client):
    test_client, _ = client
    user_id = uuid4()
    _create_goal(test_client, user_id)

    response = test_client.get("/tasks/today", headers=_headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["completed"] is False
    assert body["task"]["day_number"] == 1
    assert body["goal"]["progress"] == 0
    assert body["request_id"]


def test_today_without_active_goal_is_404(client):
    test_client, _ = client

    response = test_client.get("/tasks/today", headers=_headers(uuid4()))

    assert response.status_code == 404


def test_missing_identity_header_is_401(client):
    test_client, _ = client

    assert test_client.get("/tasks/today").status_code == 401
    assert test_client.get("/tasks/today", headers={"X-User-Id": "not-a-uuid"}).status_code == 401


def test_complete_advances_counters_and_today(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    first = _tasks(test_client, user_id, goal["id"])[0]

    response = test_client.patch(f"/tasks/{first['id']}/complete", headers=_headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["task"]["status"] == "completed"
    assert body["task"]["completed_at"] is not None
    assert body["today"]["task"]["day_number"] == 2
    assert body["today"]["goal"]["progress"] == 20
    refreshed = _goal(test_client, user_id, goal["id"])
    assert refreshed["completed_days"] == 1
    assert refreshed["current_day"] == 2


def test_double_complete_conflicts_and_counts_once(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    first = _tasks(test_client, user_id, goal["id"])[0]

    ok = test_client.patch(f"/tasks/{first['id']}/complete", headers=_headers(user_id))
    again = test_client.patch(f"/tasks/{first['id']}/complete", headers=_headers(user_id))
    skip_after = test_client.patch(f"/tasks/{first['id']}/skip", headers=_headers(user_id))

    assert ok.status_code == 200
    assert again.status_code == 409
    assert skip_after.status_code == 409
    refreshed = _goal(test_client, user_id, goal["id"])
    assert refreshed["completed_days"] == 1
    assert refreshed["skipped_days"] == 0
    assert refreshed["current_day"] == 2


def test_skip_day_two_requeues_and_shifts_schedule(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id, total_days=5)
    original = _tasks(test_client, user_id, goal["id"])
    original_dates = {task["day_number"]: date.fromisoformat(task["scheduled_date"]) for task in original}

    complete_resp = test_client.patch(f"/tasks/{original[0]['id']}/complete", headers=_headers(user_id))
    assert complete_resp.status_code == 200
    day_two = original[1]

    skip_resp = test_client.patch(f"/tasks/{day_two['id']}/skip", headers=_headers(user_id))

    assert skip_resp.status_code == 200
    body = skip_resp.json()
    assert body["task"]["status"] == "skipped"
    assert body["task"]["skipped_at"] is not None
    clone = body["requeued_task"]
    assert clone["day_number"] == 2
    assert clone["status"] == "pending"
    assert clone["rescheduled_from_id"] == day_two["id"]
    assert clone["title"] == day_two["title"]
    assert all(item["completed"] is False for item in clone["action_items"])
    # The re-queued day is the lowest pending day number, so it is served next.
    assert body["today"]["task"]["id"] == clone["id"]

    tasks = _tasks(test_client, user_id, goal["id"])
    assert len(tasks) == 6
    by_id = {task["id"]: task for task in tasks}
    assert by_id[day_two["id"]]["status"] == "skipped"
    for task in original[2:]:
        shifted = date.fromisoformat(by_id[task["id"]]["scheduled_date"])
        assert shifted == original_dates[task["day_number"]] + timedelta(days=1)
    assert date.fromisoformat(clone["scheduled_date"]) == original_dates[5] + timedelta(days=2)

    refreshed = _goal(test_client, user_id, goal["id"])
    assert refreshed["completed_days"] == 1
    assert refreshed["skipped_days"] == 1
    assert refreshed["current_day"] == 2


def test_skipping_last_pending_task_requeues_for_tomorrow(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id, total_days=1)
    only = _tasks(test_client, user_id, goal["id"])[0]

    body = test_client.patch(f"/tasks/{only['id']}/skip", headers=_headers(user_id)).json()

    assert date.fromisoformat(body["requeued_task"]["scheduled_date"]) == date.today() + timedelta(days=1)
    assert body["today"]["completed"] is False
    assert _goal(test_client, user_id, goal["id"])["is_completed"] is False


def test_completing_every_task_finishes_goal(client):
    test_client, SessionLocal = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id, total_days=2)

    for task in _tasks(test_client, user_id, goal["id"]):
        last = test_client.patch(f"/tasks/{task['id']}/complete", headers=_headers(user_id))
        assert last.status_code == 200

    body = last.json()
    assert body["today"]["completed"] is True
    assert body["today"]["task"] is None
    assert body["today"]["goal"]["progress"] == 100
    refreshed = _goal(test_client, user_id, goal["id"])
    assert refreshed["is_completed"] is True
    assert refreshed["is_active"] is False
    assert test_client.get("/tasks/today", headers=_headers(user_id)).status_code == 404

    with SessionLocal() as session:
        types = [row.type for row in session.query(Activity).filter(Activity.goal_id == UUID(goal["id"]))]
        assert types.count("completed") == 2
        assert types.count("milestone") == 1


def test_action_item_toggle_and_index_bounds(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    task = _tasks(test_client, user_id, goal["id"])[0]

    ok = test_client.patch(
        f"/tasks/{task['id']}/action-items/0",
        json={"completed": True},
        headers=_headers(user_id),
    )
    out_of_range = test_client.patch(
        f"/tasks/{task['id']}/action-items/{len(task['action_items'])}",
        json={"completed": True},
        headers=_headers(user_id),
    )
    negative = test_client.patch(
        f"/tasks/{task['id']}/action-items/-1",
        json={"completed": True},
        headers=_headers(user_id),
    )

    assert ok.status_code == 200
    assert ok.json()["task"]["action_items"][0]["completed"] is True
    assert ok.json()["task"]["status"] == "pending"
    assert out_of_range.status_code == 422
    assert negative.status_code == 422


def test_action_items_can_change_after_completion(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    task = _tasks(test_client, user_id, goal["id"])[0]
    test_client.patch(f"/tasks/{task['id']}/complete", headers=_headers(user_id))

    response = test_client.patch(
        f"/tasks/{task['id']}/action-items/1",
        json={"completed": True},
        headers=_headers(user_id),
    )

    assert response.status_code == 200
    assert response.json()["task"]["status"] == "completed"


def test_other_users_task_is_not_found(client):
    test_client, _ = client
    owner = uuid4()
    goal = _create_goal(test_client, owner)
    task = _tasks(test_client, owner, goal["id"])[0]

    response = test_client.patch(f"/tasks/{task['id']}/complete", headers=_headers(uuid4()))

    assert response.status_code == 404


def test_history_lists_finished_tasks(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    tasks = _tasks(test_client, user_id, goal["id"])
    test_client.patch(f"/tasks/{tasks[0]['id']}/complete", headers=_headers(user_id))
    test_client.patch(f"/tasks/{tasks[1]['id']}/skip", headers=_headers(user_id))

    response = test_client.get(f"/tasks/history/{goal['id']}", headers=_headers(user_id))

    assert response.status_code == 200
    statuses = sorted(task["status"] for task in response.json()["tasks"])
    assert statuses == ["completed", "skipped"]


def test_skip_activity_respects_feed_preference(client):
    test_client, SessionLocal = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)
    with SessionLocal() as session:
        session.get(User, user_id).show_in_activity_feed = False
        session.commit()
    task = _tasks(test_client, user_id, goal["id"])[0]

    test_client.patch(f"/tasks/{task['id']}/skip", headers=_headers(user_id))

    with SessionLocal() as session:
        skipped = session.query(Activity).filter(Activity.type == "skipped").one()
        assert skipped.is_public is False
        assert session.get(Goal, UUID(goal["id"])).skipped_days == 1
