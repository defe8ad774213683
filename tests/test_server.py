"""Tests for the HTTP surface: webhook, health and session routes."""

from unittest.mock import MagicMock

import pytest
from starlette.testclient import TestClient

from leadcatcher.channels.whatsapp import WhatsAppChannel
from leadcatcher.core.brain import LeadBrain
from leadcatcher.server import create_app


def text_webhook(sender="4915112345678", body="Hello"):
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "changes": [
                    {
                        "value": {
                            "contacts": [{"profile": {"name": "Ada"}}],
                            "messages": [{"from": sender, "id": "wamid.1", "type": "text", "text": {"body": body}}],
                        }
                    }
                ]
            }
        ],
    }


@pytest.fixture
def brain(store):
    dispatcher = MagicMock()
    dispatcher.get_status.return_value = {"running": True}
    reaper = MagicMock()
    reaper.get_status.return_value = {"running": True}
    channel = WhatsAppChannel({"verify_token": "secret", "access_token": "t", "phone_number_id": "1"})
    return LeadBrain(store, channel, dispatcher, reaper)


@pytest.fixture
def client(brain):
    return TestClient(create_app(brain))


class TestWebhookRoutes:
    def test_verification_handshake(self, client):
        response = client.get(
            "/webhook/whatsapp",
            params={"hub.mode": "subscribe", "hub.verify_token": "secret", "hub.challenge": "12345"},
        )
        assert response.status_code == 200
        assert response.text == "12345"

    def test_verification_rejects_wrong_token(self, client):
        response = client.get(
            "/webhook/whatsapp",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "12345"},
        )
        assert response.status_code == 403

    def test_inbound_text_is_queued(self, client, store):
        response = client.post("/webhook/whatsapp", json=text_webhook(body="Hi there"))

        assert response.status_code == 200
        session = store.get("4915112345678")
        assert [f.text for f in session.inbound.drain()] == ["Hi there"]

    def test_status_updates_are_acknowledged(self, client, store):
        body = {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"value": {"statuses": [{"status": "read", "recipient_id": "49151"}]}}]}],
        }

        response = client.post("/webhook/whatsapp", json=body)

        assert response.status_code == 200
        assert len(store) == 0

    def test_invalid_json(self, client):
        response = client.post("/webhook/whatsapp", content=b"not json", headers={"content-type": "application/json"})
        assert response.status_code == 400


class TestHealthRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status(self, client, store):
        store.get_or_create("a")
        data = client.get("/status").json()
        assert data["sessions"] == 1
        assert data["dispatcher"] == {"running": True}


class TestSessionRoutes:
    def test_list_sessions(self, client, store):
        store.enqueue("4915112345678", "hello")

        sessions = client.get("/sessions").json()["sessions"]

        assert len(sessions) == 1
        assert sessions[0]["id"] == "4915112345678"
        assert sessions[0]["queued"] == 1
        assert sessions[0]["tool_call_state"] == "idle"

    def test_delete_session(self, client, store):
        store.get_or_create("a")

        assert client.delete("/sessions/a").status_code == 200
        assert "a" not in store
        assert client.delete("/sessions/a").status_code == 404

    def test_takeover_toggle(self, client, store):
        response = client.post("/sessions/a/takeover", json={"enabled": True})

        assert response.status_code == 200
        assert store.get("a").human_takeover is True

        client.post("/sessions/a/takeover", json={"enabled": False})
        assert store.get("a").human_takeover is False

    def test_takeover_requires_boolean(self, client):
        response = client.post("/sessions/a/takeover", json={"enabled": "yes"})
        assert response.status_code == 400
