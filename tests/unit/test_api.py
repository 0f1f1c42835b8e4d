"""Tests for the HTTP API."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from gymbuddy.core.dispatch import DispatchResponse, get_dispatcher
from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.core.routing.router import MessageRouter, get_router
from gymbuddy.main import app


@pytest.fixture
def message_router():
    return MessageRouter()


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.process = AsyncMock(
        return_value=DispatchResponse(
            message="Got it!",
            intent="availability_update",
            confidence="high",
            action="update_availability",
            slots=[TimeSlot(day="monday", start_hour=9, end_hour=11)],
            processing_time_ms=1.5,
        )
    )
    return mock


@pytest.fixture
def client(message_router, dispatcher):
    app.dependency_overrides[get_router] = lambda: message_router
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoints:
    """Test health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "chat_enabled" in data

    def test_live(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health_reports_linked_users(self, client):
        assert isinstance(client.get("/health").json()["linked_users"], int)


class TestMessageEndpoints:
    """Test /messages endpoints."""

    def test_process_message(self, client, dispatcher):
        response = client.post("/messages", json={"text": "Monday 9-11am", "user_id": "42"})

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "update_availability"
        assert data["slots"] == [{"day": "monday", "startHour": 9, "endHour": 11}]

        sent = dispatcher.process.await_args.args[0]
        assert sent.text == "Monday 9-11am"
        assert sent.user_id == "42"

    def test_process_message_validation_error(self, client, dispatcher):
        response = client.post("/messages", json={"text": "hi"})

        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"
        dispatcher.process.assert_not_called()

    def test_classify_without_context(self, client):
        response = client.post("/messages/classify", json={"text": "remove my Tuesday slot"})

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "delete_matching"
        assert data["criteria"]["day"] == "tuesday"
        assert data["is_destructive"] is True

    def test_classify_with_context(self, client):
        response = client.post(
            "/messages/classify",
            json={
                "text": "remove my Monday 6-9am slot",
                "context": [
                    {"day": "monday", "startHour": 6, "endHour": 9},
                    {"day": "tuesday", "startHour": 18, "endHour": 20},
                ],
            },
        )

        data = response.json()
        assert data["action"] == "delete_matching"
        assert data["matched_slots"] == [{"day": "monday", "startHour": 6, "endHour": 9}]

    def test_classify_general_chat(self, client):
        response = client.post("/messages/classify", json={"text": "tell me a joke"})

        data = response.json()
        assert data["intent"]["intent"] == "general_chat"
        assert data["action"] == "fallback_chat"
        assert data["is_destructive"] is False

    def test_stats(self, client):
        client.post("/messages/classify", json={"text": "tell me a joke"})
        client.post("/messages/classify", json={"text": "show my availability"})

        response = client.get("/messages/stats")

        data = response.json()
        assert data["total"] == 2
        assert data["fallbacks"] == 1
        assert data["fallback_rate"] == 0.5
