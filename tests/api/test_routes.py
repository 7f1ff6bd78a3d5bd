"""HTTP tests for the chat and events routes against an in-memory database."""

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.main import app
from app.security import create_jwt, get_db


@pytest.fixture
def client(session_factory, household, monkeypatch):
    """A client signed in as the household owner, with the model disabled."""
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    test_client.cookies.set(settings.SESSION_COOKIE_NAME, create_jwt(household.jordan.id))
    yield test_client
    app.dependency_overrides.clear()


def event_body(title: str = "Dentist", start: str = "2024-01-02T17:00:00Z", end: str = "2024-01-02T18:00:00Z"):
    return {"title": title, "start": start, "end": end}


class TestHealthAndAuth:
    """Unauthenticated access."""

    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"ok": True}

    def test_missing_cookie(self, client) -> None:
        client.cookies.clear()

        response = client.post("/chat", json={"message": "dentist 2pm"})

        assert response.status_code == 401

    def test_bad_token(self, client) -> None:
        client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-token")

        assert client.get("/events/members").status_code == 401


class TestChat:
    """POST /chat."""

    def test_single_proposal_assigned_to_caller(self, client, household) -> None:
        response = client.post("/chat", json={"message": "dentist 2pm", "timezoneOffset": 480})

        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "create_event"
        assert body["proposal"]["title"] == "Dentist"
        assert body["proposal"]["memberIds"] == [household.jordan.id]

    def test_batch_proposal(self, client) -> None:
        response = client.post(
            "/chat",
            json={"message": "ellie preschool laurel hill m-f 9am-4pm for 8 weeks", "timezoneOffsetMinutes": 480},
        )

        body = response.json()
        assert body["type"] == "create_events"
        assert len(body["proposals"]) == 40
        assert body["recurrenceId"].startswith("rec-")

    def test_hint_for_small_talk(self, client) -> None:
        body = client.post("/chat", json={"message": "hello"}).json()

        assert body["type"] == "message"
        assert body["message"].startswith("Try describing an event")

    def test_empty_message_is_rejected(self, client) -> None:
        assert client.post("/chat", json={"message": ""}).status_code == 422

    def test_oversized_message_is_rejected(self, client) -> None:
        assert client.post("/chat", json={"message": "coffee at 3 " * 200}).status_code == 422


class TestEvents:
    """CRUD on /events."""

    def test_create_and_list(self, client, household) -> None:
        created = client.post("/events", json=event_body())

        assert created.status_code == 201
        assert created.json()["memberIds"] == [household.jordan.id]

        listed = client.get(
            "/events", params={"start": "2024-01-02T00:00:00Z", "end": "2024-01-03T00:00:00Z"}
        )
        assert [e["id"] for e in listed.json()] == [created.json()["id"]]

    def test_validation_errors(self, client) -> None:
        inverted = client.post("/events", json=event_body(end="2024-01-02T16:00:00Z"))
        too_long = client.post("/events", json=event_body(end="2024-01-04T17:00:00Z"))

        assert inverted.status_code == 422
        assert inverted.json()["detail"] == "End time must be after start time"
        assert too_long.status_code == 422
        assert too_long.json()["detail"] == "Event duration cannot exceed 24 hours"

    def test_read_only_member(self, client, household) -> None:
        client.cookies.set(settings.SESSION_COOKIE_NAME, create_jwt(household.ellie.id))

        assert client.post("/events", json=event_body()).status_code == 403

    def test_update_and_delete(self, client) -> None:
        event_id = client.post("/events", json=event_body()).json()["id"]

        patched = client.patch(f"/events/{event_id}", json={"title": "Dentist Checkup"})
        assert patched.status_code == 200
        assert patched.json()["title"] == "Dentist Checkup"

        assert client.delete(f"/events/{event_id}").status_code == 204
        assert client.patch(f"/events/{event_id}", json={"title": "x"}).status_code == 404

    def test_confirm_batch_then_delete_following(self, client) -> None:
        chat = client.post(
            "/chat",
            json={"message": "ellie preschool laurel hill m-f 9am-4pm for 8 weeks", "timezoneOffset": 480},
        ).json()

        saved = client.post(
            "/events/batch", json={"events": chat["proposals"], "recurrenceId": chat["recurrenceId"]}
        )
        assert saved.status_code == 201
        assert len(saved.json()) == 40

        deleted = client.delete(
            f"/events/recurrence/{chat['recurrenceId']}",
            params={"from_start": chat["proposals"][10]["start"]},
        )
        assert deleted.json() == {"deleted": 30}

    def test_members(self, client) -> None:
        members = client.get("/events/members").json()

        assert [m["name"] for m in members] == ["Jordan", "Ellie"]
        assert members[0]["role"] == "owner"
