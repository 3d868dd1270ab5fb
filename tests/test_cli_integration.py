from __future__ import annotations

import sys
import types

from typer.testing import CliRunner

from browser_relay.cli import app
from browser_relay.config import RelayConfig
from browser_relay.server import service


def _base_config() -> RelayConfig:
    return RelayConfig.model_validate(
        {
            "llm": {"provider": "mock"},
            "browser": {"headless": True},
            "server": {"host": "127.0.0.1", "port": 9000},
        }
    )


class ClosableStub:
    def __init__(self, name: str) -> None:
        self.name = name
        self.closed = 0

    def close(self) -> None:
        self.closed += 1


class DummyController:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.launched = 0
        self.shutdowns = 0

    def launch(self, mode=None):  # type: ignore[no-untyped-def]
        self.launched += 1
        if self.fail:
            raise RuntimeError("no chromium")

    def shutdown(self) -> None:
        self.shutdowns += 1


def _patch_components(monkeypatch, controller: DummyController, load_args: dict[str, object]):
    config = _base_config()
    llm = ClosableStub("llm")
    history = ClosableStub("history")

    def fake_load_config(path, *, env_file=None, **overrides):  # type: ignore[no-untyped-def]
        load_args["path"] = path
        load_args["env_file"] = env_file
        load_args["overrides"] = overrides
        return config

    monkeypatch.setattr("browser_relay.cli.load_config", fake_load_config)
    monkeypatch.setattr("browser_relay.cli.build_notifier", lambda config: "notifier-stub")
    monkeypatch.setattr("browser_relay.cli.build_llm", lambda config: llm)
    monkeypatch.setattr("browser_relay.cli.build_history", lambda config: history)
    monkeypatch.setattr(
        "browser_relay.cli.build_controller",
        lambda config, notifier: controller,
    )
    monkeypatch.setattr(
        "browser_relay.cli.build_orchestrator",
        lambda config, controller, llm, history, notifier: "orchestrator-stub",
    )
    monkeypatch.setattr(service, "state", service.RelayState())
    return llm, history


def test_serve_launches_session_and_invokes_uvicorn(monkeypatch):
    runner = CliRunner()
    calls: list[dict[str, object]] = []

    def fake_run(app, host, port):  # type: ignore[no-untyped-def]
        calls.append({"app": app, "host": host, "port": port})

    monkeypatch.setitem(sys.modules, "uvicorn", types.SimpleNamespace(run=fake_run))
    controller = DummyController()
    load_args: dict[str, object] = {}
    llm, history = _patch_components(monkeypatch, controller, load_args)

    result = runner.invoke(
        app,
        ["serve", "--port", "9000", "--windowed", "--start-url", "https://example.com"],
    )

    assert result.exit_code == 0, result.stdout
    assert load_args["overrides"] == {
        "server": {"port": 9000},
        "browser": {"headless": False, "start_url": "https://example.com"},
    }
    assert controller.launched == 1
    assert controller.shutdowns == 1
    assert calls == [{"app": service.app, "host": "127.0.0.1", "port": 9000}]
    assert service.state.controller is controller
    assert service.state.orchestrator == "orchestrator-stub"
    assert service.state.history is history
    assert llm.closed == 1
    assert history.closed == 1


def test_serve_exits_when_session_cannot_launch(monkeypatch):
    runner = CliRunner()
    calls: list[object] = []
    monkeypatch.setitem(
        sys.modules,
        "uvicorn",
        types.SimpleNamespace(run=lambda *args, **kwargs: calls.append(args)),
    )
    controller = DummyController(fail=True)
    llm, history = _patch_components(monkeypatch, controller, {})

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 1
    assert calls == []
    assert controller.shutdowns == 1
    assert llm.closed == 1
    assert history.closed == 1


def test_version_command():
    result = CliRunner().invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.strip()
