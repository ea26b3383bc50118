from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.deps import get_db
from app.db.models.goal_invite import GoalInvite
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


def _create_goal(client: TestClient, user_id: UUID) -> dict:
    response = client.post(
        "/goals",
        json={"type": "health", "title": "Run 5k", "total_days": 5, "daily_minutes": 30},
        headers=_headers(user_id),
    )
    assert response.status_code == 201
    return response.json()["goal"]


def _invite(client: TestClient, sender: UUID, friend: UUID, goal_id: str):
    return client.post(
        "/goals/invites",
        json={"friend_id": str(friend), "goal_id": goal_id},
        headers=_headers(sender),
    )


def _titles(client: TestClient, user_id: UUID, goal_id: str) -> list:
    tasks = client.get(f"/tasks/goal/{goal_id}", headers=_headers(user_id)).json()["tasks"]
    return [task["title"] for task in tasks]


def test_invite_is_listed_for_recipient(client):
    test_client, _ = client
    sender, friend = uuid4(), uuid4()
    goal = _create_goal(test_client, sender)

    sent = _invite(test_client, sender, friend, goal["id"])
    listed = test_client.get("/goals/invites", headers=_headers(friend))

    assert sent.status_code == 201
    invites = listed.json()["invites"]
    assert len(invites) == 1
    assert invites[0]["from_user_id"] == str(sender)
    assert invites[0]["goal"]["title"] == "Run 5k"
    assert invites[0]["goal"]["total_days"] == 5
    assert test_client.get("/goals/invites", headers=_headers(sender)).json()["invites"] == []


def test_self_and_duplicate_invites_are_rejected(client):
    test_client, _ = client
    sender, friend = uuid4(), uuid4()
    goal = _create_goal(test_client, sender)

    assert _invite(test_client, sender, sender, goal["id"]).status_code == 400
    assert _invite(test_client, sender, friend, goal["id"]).status_code == 201
    assert _invite(test_client, sender, friend, goal["id"]).status_code == 400


def test_inviting_with_someone_elses_goal_is_404(client):
    test_client, _ = client
    owner, sender, friend = uuid4(), uuid4(), uuid4()
    goal = _create_goal(test_client, owner)

    assert _invite(test_client, sender, friend, goal["id"]).status_code == 404


def test_accept_creates_linked_goals_for_both_users(client):
    test_client, SessionLocal = client
    sender, friend = uuid4(), uuid4()
    source_goal = _create_goal(test_client, sender)
    _invite(test_client, sender, friend, source_goal["id"])
    invite_id = test_client.get("/goals/invites", headers=_headers(friend)).json()["invites"][0]["id"]

    response = test_client.post(f"/goals/invites/{invite_id}/accept", headers=_headers(friend))

    assert response.status_code == 200
    body = response.json()
    mine, theirs = body["goal"], body["partner_goal"]
    assert mine["is_shared_goal"] is True and theirs["is_shared_goal"] is True
    assert mine["partner_id"] == str(sender)
    assert theirs["partner_id"] == str(friend)
    assert mine["partner_goal_id"] == theirs["id"]
    assert theirs["partner_goal_id"] == mine["id"]
    assert mine["shared_by_user_id"] == theirs["shared_by_user_id"] == str(sender)

    # Both participants replay the sender's plan into independent task sets.
    source_titles = _titles(test_client, sender, source_goal["id"])
    assert _titles(test_client, friend, mine["id"]) == source_titles
    assert _titles(test_client, sender, theirs["id"]) == source_titles

    sender_active = test_client.get("/goals/active", headers=_headers(sender)).json()["goal"]
    friend_active = test_client.get("/goals/active", headers=_headers(friend)).json()["goal"]
    assert sender_active["id"] == theirs["id"]
    assert friend_active["id"] == mine["id"]
    source_after = test_client.get(f"/goals/{source_goal['id']}", headers=_headers(sender)).json()["goal"]
    assert source_after["is_active"] is False

    with SessionLocal() as session:
        assert session.query(GoalInvite).count() == 0


def test_partner_progress_reflects_partner_completions(client):
    test_client, _ = client
    sender, friend = uuid4(), uuid4()
    source_goal = _create_goal(test_client, sender)
    _invite(test_client, sender, friend, source_goal["id"])
    invite_id = test_client.get("/goals/invites", headers=_headers(friend)).json()["invites"][0]["id"]
    pair = test_client.post(f"/goals/invites/{invite_id}/accept", headers=_headers(friend)).json()

    sender_today = test_client.get("/tasks/today", headers=_headers(sender)).json()
    test_client.patch(f"/tasks/{sender_today['task']['id']}/complete", headers=_headers(sender))

    response = test_client.get(f"/goals/{pair['goal']['id']}/partner-progress", headers=_headers(friend))

    assert response.status_code == 200
    body = response.json()
    assert body["partner_id"] == str(sender)
    assert body["progress"]["completed_days"] == 1
    assert body["progress"]["progress"] == 20
    assert len(body["tasks"]) == 5
    own = test_client.get(f"/goals/{pair['goal']['id']}", headers=_headers(friend)).json()["goal"]
    assert own["completed_days"] == 0


def test_partner_progress_requires_shared_goal(client):
    test_client, _ = client
    user_id = uuid4()
    goal = _create_goal(test_client, user_id)

    response = test_client.get(f"/goals/{goal['id']}/partner-progress", headers=_headers(user_id))

    assert response.status_code == 404


def test_decline_removes_invite(client):
    test_client, _ = client
    sender, friend = uuid4(), uuid4()
    goal = _create_goal(test_client, sender)
    _invite(test_client, sender, friend, goal["id"])
    invite_id = test_client.get("/goals/invites", headers=_headers(friend)).json()["invites"][0]["id"]

    declined = test_client.delete(f"/goals/invites/{invite_id}", headers=_headers(friend))
    again = test_client.delete(f"/goals/invites/{invite_id}", headers=_headers(friend))

    assert declined.status_code == 200
    assert declined.json()["declined"] is True
    assert again.status_code == 404
    assert test_client.get("/goals/invites", headers=_headers(friend)).json()["invites"] == []


def test_accepting_someone_elses_invite_is_404(client):
    test_client, _ = client
    sender, friend = uuid4(), uuid4()
    goal = _create_goal(test_client, sender)
    _invite(test_client, sender, friend, goal["id"])
    invite_id = test_client.get("/goals/invites", headers=_headers(friend)).json()["invites"][0]["id"]

    response = test_client.post(f"/goals/invites/{invite_id}/accept", headers=_headers(uuid4()))

    assert response.status_code == 404
