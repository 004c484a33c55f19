"""Shared fixtures for nerovaagent tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest


class FakeDaemon:
    """DaemonManager stand-in that records how it was used."""

    def __init__(self, running: bool = True, pid: int = 4242):
        self.running = running
        self.pid = pid
        self.probe_calls = 0
        self.ensure_calls = 0

    async def is_running(self) -> bool:
        self.probe_calls += 1
        return self.running

    async def ensure(self, config: dict) -> int:
        self.ensure_calls += 1
        self.running = True
        return self.pid


@pytest.fixture
def environ(tmp_path: Path) -> dict[str, str]:
    """Environment pointing the config home at an empty temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    return {"NEROVA_AGENT_HOME": str(home)}


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon()


@pytest.fixture
def stopped_daemon() -> FakeDaemon:
    return FakeDaemon(running=False)


@pytest.fixture
def client() -> AsyncMock:
    fake = AsyncMock()
    fake.origin = "http://127.0.0.1:3333"
    fake.request.return_value = {"status": "completed", "timeline": []}
    return fake


@pytest.fixture
def sample_run() -> dict:
    """A run result as the daemon reports it."""
    return {
        "ok": True,
        "status": "completed",
        "iterations": 3,
        "agent": {"id": "agent-7"},
        "timeline": [
            {
                "iteration": 1,
                "decision": {
                    "action": "click",
                    "reason": "open the login dialog",
                    "target": {
                        "reason": "login button",
                        "hints": {"text_exact": ["Log in"], "text_partial": "Log"},
                    },
                },
                "result": {
                    "next": "continue",
                    "clicked": {"name": "Log in", "id": "btn-1", "hit_state": "hit"},
                },
            },
            {
                "iteration": 2,
                "decision": {"action": "type", "summary": "enter username"},
                "assistant": {"parsed": {"field": "username"}, "raw": "ignored"},
            },
            {
                "iteration": 3,
                "decision": {"action": "accept"},
                "result": {"next": "stop", "reason": "goal reached"},
            },
        ],
        "completeHistory": ["opened login", "typed username"],
    }
