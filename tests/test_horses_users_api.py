"""API tests for horse cooldowns and user roles."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from stablehand.main import app, event_repo, horse_repo, timeline_repo, user_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    horse_repo._store.clear()
    user_repo._store.clear()
    event_repo._store.clear()
    timeline_repo._entries.clear()
    yield
    horse_repo._store.clear()
    user_repo._store.clear()
    event_repo._store.clear()
    timeline_repo._entries.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _create_horse(client: TestClient, name: str = "Biscuit") -> dict:
    resp = client.post("/horses", json={"name": name})
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Horses
# ---------------------------------------------------------------------------


def test_create_and_list_horses(client: TestClient):
    horse = _create_horse(client)
    assert horse["cooldown_start_date"] is None

    resp = client.get("/horses")
    assert [h["id"] for h in resp.json()] == [horse["id"]]

    assert client.get(f"/horses/{horse['id']}").json()["name"] == "Biscuit"


def test_get_missing_horse_is_404(client: TestClient):
    resp = client.get("/horses/nope")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Horse not found"


def test_set_and_clear_cooldown(client: TestClient):
    horse = _create_horse(client)

    resp = client.put(
        f"/horses/{horse['id']}/cooldown",
        json={
            "cooldown_start_date": "2024-01-10T00:00:00Z",
            "cooldown_end_date": "2024-01-12T00:00:00Z",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["cooldown_end_date"].startswith("2024-01-12")

    resp = client.put(f"/horses/{horse['id']}/cooldown", json={})
    assert resp.status_code == 200
    assert resp.json()["cooldown_start_date"] is None
    assert resp.json()["cooldown_end_date"] is None


def test_half_set_cooldown_is_rejected(client: TestClient):
    horse = _create_horse(client)
    resp = client.put(
        f"/horses/{horse['id']}/cooldown",
        json={"cooldown_start_date": "2024-01-10T00:00:00Z"},
    )
    assert resp.status_code == 422


def test_inverted_cooldown_is_rejected(client: TestClient):
    horse = _create_horse(client)
    resp = client.put(
        f"/horses/{horse['id']}/cooldown",
        json={
            "cooldown_start_date": "2024-01-12T00:00:00Z",
            "cooldown_end_date": "2024-01-10T00:00:00Z",
        },
    )
    assert resp.status_code == 422


def test_cooldown_for_missing_horse_is_404(client: TestClient):
    resp = client.put("/horses/nope/cooldown", json={})
    assert resp.status_code == 404


def test_cooldown_set_through_api_blocks_event(client: TestClient):
    horse = _create_horse(client, "Clover")
    client.put(
        f"/horses/{horse['id']}/cooldown",
        json={
            "cooldown_start_date": "2024-01-10T00:00:00Z",
            "cooldown_end_date": "2024-01-12T00:00:00Z",
        },
    )

    resp = client.post(
        "/calendar",
        json={
            "title": "Lesson",
            "start_date": "2024-01-12T23:30:00Z",
            "duration": 30,
            "horses": [horse["id"]],
        },
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["message"] == "Clover"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def test_create_and_list_users(client: TestClient):
    resp = client.post(
        "/admin/users",
        json={
            "name": "Sam Lee",
            "username": "sam",
            "email": "sam@example.com",
            "roles": ["lessonAssistant", "horseLeader"],
        },
    )
    assert resp.status_code == 201

    users = client.get("/admin/users").json()
    assert len(users) == 1
    assert users[0]["roles"] == ["lessonAssistant", "horseLeader"]


def test_unknown_role_is_rejected(client: TestClient):
    resp = client.post(
        "/admin/users",
        json={"name": "X", "username": "x", "email": "x@example.com", "roles": ["farrier"]},
    )
    assert resp.status_code == 422


def test_promote_toggles_admin(client: TestClient):
    user = client.post(
        "/admin/users",
        json={"name": "Avery", "username": "avery", "email": "avery@example.com"},
    ).json()

    promoted = client.post(f"/admin/users/{user['id']}/promote").json()
    assert promoted["roles"] == ["admin"]

    demoted = client.post(f"/admin/users/{user['id']}/promote").json()
    assert demoted["roles"] == []


def test_promote_missing_user_is_404(client: TestClient):
    resp = client.post("/admin/users/nope/promote")
    assert resp.status_code == 404


def test_cooldown_dates_without_zone_are_stored_as_utc(client: TestClient):
    horse = _create_horse(client)
    resp = client.put(
        f"/horses/{horse['id']}/cooldown",
        json={
            "cooldown_start_date": "2024-01-10T00:00:00",
            "cooldown_end_date": "2024-01-12T00:00:00Z",
        },
    )
    assert resp.status_code == 200
    stored = horse_repo.get(horse["id"])
    assert stored.cooldown_start_date.tzinfo is not None


def _create_user(client: TestClient, username: str = "sam", **extra) -> dict:
    body = {"name": "Sam Lee", "username": username, "email": f"{username}@example.com"}
    body.update(extra)
    resp = client.post("/admin/users", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_duplicate_username_is_rejected(client: TestClient):
    _create_user(client)
    resp = client.post(
        "/admin/users",
        json={"name": "Other", "username": "sam", "email": "other@example.com"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Username is already taken"


def test_admin_edits_user(client: TestClient):
    user = _create_user(client)

    resp = client.put(
        f"/admin/users/{user['id']}",
        json={
            "name": "Samantha Lee",
            "username": "samantha",
            "email": "samantha@example.com",
            "phone": "5415550199",
            "roles": ["horseLeader"],
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == user["id"]
    assert body["username"] == "samantha"
    assert body["roles"] == ["horseLeader"]
    assert client.get("/users/samantha").json()["phone"] == "5415550199"


def test_admin_edit_missing_user_is_404(client: TestClient):
    resp = client.put(
        "/admin/users/nope",
        json={"name": "X", "username": "x", "email": "x@example.com"},
    )
    assert resp.status_code == 404


def test_admin_deletes_user_and_detaches_from_events(client: TestClient):
    instructor = _create_user(client, "morgan", roles=["instructor"])
    created = client.post(
        "/calendar",
        json={
            "title": "Lesson",
            "start_date": "2024-02-01T16:00:00Z",
            "duration": 60,
            "instructor": instructor["id"],
        },
    ).json()["event"]
    assert created["instructor_ids"] == [instructor["id"]]

    resp = client.delete(f"/admin/users/{instructor['id']}")
    assert resp.status_code == 204

    assert client.get("/admin/users").json() == []
    assert event_repo.get(created["id"]).instructor_ids == []
    assert client.delete(f"/admin/users/{instructor['id']}").status_code == 404
