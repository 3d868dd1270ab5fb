from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from browser_relay.browser.base import DisplayMode
from browser_relay.history.base import InMemoryHistoryStore
from browser_relay.models import HistoryEntry
from browser_relay.orchestrator.runner import ChatResult
from browser_relay.server import service


class StubController:
    def __init__(self) -> None:
        self.mode = DisplayMode.HEADLESS
        self.is_ready = True
        self.toggles = 0
        self.fail = False

    def screenshot(self) -> bytes:
        if self.fail:
            raise RuntimeError("page crashed")
        return b"png-bytes"

    def toggle_mode(self) -> DisplayMode:
        if self.fail:
            raise RuntimeError("cannot relaunch")
        self.toggles += 1
        self.mode = self.mode.toggled()
        return self.mode


class StubOrchestrator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str | None]] = []
        self.fail = False

    def handle(self, message: str, username: str | None = None) -> ChatResult:
        self.calls.append((message, username))
        if self.fail:
            raise RuntimeError("screenshot failed")
        return ChatResult(conversation="Done.", screenshot="c2hvdA==")


@pytest.fixture
def components(monkeypatch: pytest.MonkeyPatch):
    controller = StubController()
    orchestrator = StubOrchestrator()
    history = InMemoryHistoryStore()
    monkeypatch.setattr(
        service,
        "state",
        service.RelayState(controller=controller, orchestrator=orchestrator, history=history),
    )
    return controller, orchestrator, history


@pytest.fixture
def client(components) -> TestClient:
    return TestClient(service.app)


def test_chat_returns_reply_and_screenshot(client, components):
    _, orchestrator, _ = components

    response = client.post("/api/chat", json={"message": "find cats", "username": "alice"})

    assert response.status_code == 200
    assert response.json() == {"response": "Done.", "screenshot": "c2hvdA==", "success": True}
    assert orchestrator.calls == [("find cats", "alice")]


def test_chat_username_is_optional(client, components):
    _, orchestrator, _ = components

    response = client.post("/api/chat", json={"message": "hi"})

    assert response.status_code == 200
    assert orchestrator.calls == [("hi", None)]


def test_chat_failure_returns_500_payload(client, components):
    _, orchestrator, _ = components
    orchestrator.fail = True

    response = client.post("/api/chat", json={"message": "find cats"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "screenshot failed"
    assert body["response"] == service.CHAT_ERROR_REPLY


def test_screenshot_endpoint_encodes_base64(client, components):
    response = client.get("/api/screenshot")

    assert response.status_code == 200
    assert base64.b64decode(response.json()["screenshot"]) == b"png-bytes"


def test_screenshot_failure_returns_500(client, components):
    controller, _, _ = components
    controller.fail = True

    response = client.get("/api/screenshot")

    assert response.status_code == 500
    assert response.json() == {"error": "page crashed"}


def test_history_is_newest_first(client, components):
    _, _, history = components
    now = datetime.now(timezone.utc)
    history.add(HistoryEntry(username="alice", message="first", ai_response="a", created_at=now))
    history.add(
        HistoryEntry(
            username="alice",
            message="second",
            ai_response="b",
            command='{"action":"press","key":"Enter"}',
            created_at=now + timedelta(seconds=5),
        )
    )
    history.add(HistoryEntry(username="bob", message="other", ai_response="c"))

    response = client.get("/api/history/alice")

    assert response.status_code == 200
    items = response.json()["history"]
    assert [item["message"] for item in items] == ["second", "first"]
    assert items[0]["command"] == '{"action":"press","key":"Enter"}'


def test_toggle_headless_flips_mode(client, components):
    controller, _, _ = components

    first = client.post("/api/toggle-headless")
    second = client.post("/api/toggle-headless")

    assert first.json() == {"mode": "windowed", "success": True}
    assert second.json() == {"mode": "headless", "success": True}
    assert controller.toggles == 2


def test_toggle_failure_returns_500(client, components):
    controller, _, _ = components
    controller.fail = True

    response = client.post("/api/toggle-headless")

    assert response.status_code == 500
    assert response.json()["error"] == "cannot relaunch"


def test_health_reports_mode(client):
    response = client.get("/health")

    assert response.json() == {"status": "ok", "mode": "headless"}


def test_unconfigured_service_answers_503(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(service, "state", service.RelayState())
    client = TestClient(service.app)

    assert client.post("/api/chat", json={"message": "hi"}).status_code == 503
    assert client.get("/api/screenshot").status_code == 503
    assert client.get("/health").json()["status"] == "unconfigured"
