"""Tests for core/daemon.py and core/agent_daemon.py."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nerovaagent.core import daemon as daemon_module
from nerovaagent.core.agent_daemon import boot_daemon, load_entry_point
from nerovaagent.core.daemon import PidFileDaemonManager, get_daemon_manager, require_daemon
from nerovaagent.errors import DaemonNotRunningError, DaemonStartError


@pytest.fixture
def manager(tmp_path: Path) -> PidFileDaemonManager:
    return PidFileDaemonManager(tmp_path / "home", boot_timeout_seconds=0.5, poll_interval=0.01)


class TestPidFile:
    def test_no_pid_file(self, manager):
        assert manager.read_pid() is None

    def test_round_trip(self, manager):
        manager.write_pid(1234)
        assert manager.read_pid() == 1234
        manager.clear_pid()
        assert not manager.pid_path.exists()

    def test_clear_only_own_pid(self, manager):
        manager.write_pid(1234)
        manager.clear_pid(999)
        assert manager.read_pid() == 1234

    def test_garbage_pid_file(self, manager):
        manager.home.mkdir(parents=True)
        manager.pid_path.write_text("not a pid", encoding="utf-8")
        assert manager.read_pid() is None


class TestIsRunning:
    @pytest.mark.asyncio
    async def test_live_process(self, manager):
        manager.write_pid(os.getpid())
        assert await manager.is_running()

    @pytest.mark.asyncio
    async def test_stale_pid(self, manager, monkeypatch):
        manager.write_pid(1234)
        monkeypatch.setattr(daemon_module, "_process_alive", lambda pid: False)
        assert not await manager.is_running()

    @pytest.mark.asyncio
    async def test_gate_raises(self, manager):
        with pytest.raises(DaemonNotRunningError, match="nerovaagent"):
            await require_daemon(manager)

    @pytest.mark.asyncio
    async def test_gate_passes(self, manager):
        manager.write_pid(os.getpid())
        await require_daemon(manager)


class TestEnsure:
    @pytest.mark.asyncio
    async def test_existing_daemon_reused(self, manager):
        manager.write_pid(os.getpid())
        with patch("nerovaagent.core.daemon.subprocess.Popen") as mock_popen:
            pid = await manager.ensure({})
        assert pid == os.getpid()
        mock_popen.assert_not_called()

    @pytest.mark.asyncio
    async def test_spawns_and_waits_for_pid(self, manager):
        def fake_popen(cmd, **kwargs):
            manager.write_pid(os.getpid())
            process = MagicMock()
            process.poll.return_value = None
            return process

        with patch("nerovaagent.core.daemon.subprocess.Popen", side_effect=fake_popen) as mock_popen:
            pid = await manager.ensure({"runtime": {"origin": "http://127.0.0.1:9999"}})

        assert pid == os.getpid()
        args, kwargs = mock_popen.call_args
        assert args[0] == [sys.executable, "-m", "nerovaagent", "agent-daemon"]
        assert kwargs["env"]["NEROVA_AGENT_ORIGIN"] == "http://127.0.0.1:9999"
        assert kwargs["start_new_session"] is True

    @pytest.mark.asyncio
    async def test_child_exits_early(self, manager):
        process = MagicMock()
        process.poll.return_value = 1
        with patch("nerovaagent.core.daemon.subprocess.Popen", return_value=process):
            with pytest.raises(DaemonStartError, match="exited during startup"):
                await manager.ensure({})

    @pytest.mark.asyncio
    async def test_boot_timeout(self, manager):
        process = MagicMock()
        process.poll.return_value = None
        with patch("nerovaagent.core.daemon.subprocess.Popen", return_value=process):
            with pytest.raises(DaemonStartError, match="did not come up"):
                await manager.ensure({})

    @pytest.mark.asyncio
    async def test_spawn_failure(self, manager):
        with patch("nerovaagent.core.daemon.subprocess.Popen", side_effect=OSError("no exec")):
            with pytest.raises(DaemonStartError, match="no exec"):
                await manager.ensure({})

    @pytest.mark.asyncio
    async def test_unusable_home_is_a_start_error(self, tmp_path: Path):
        home = tmp_path / "home-is-a-file"
        home.write_text("", encoding="utf-8")
        manager = PidFileDaemonManager(home, boot_timeout_seconds=0.1)
        with patch("nerovaagent.core.daemon.subprocess.Popen") as mock_popen:
            with pytest.raises(DaemonStartError, match="Could not spawn"):
                await manager.ensure({})
        mock_popen.assert_not_called()


class TestGetDaemonManager:
    def test_from_config(self, tmp_path: Path):
        manager = get_daemon_manager({"daemon": {"home": str(tmp_path), "boot_timeout_seconds": 3}})
        assert manager.pid_path == tmp_path / "agent-daemon.pid"
        assert manager.boot_timeout == 3.0


RUNTIME_MODULE = """
calls = []

def serve(config):
    calls.append(config["daemon"]["runtime"])

async def serve_async(config):
    calls.append("async")

def explode(config):
    raise RuntimeError("boom")
"""


@pytest.fixture
def runtime_module(tmp_path: Path, monkeypatch) -> str:
    package_dir = tmp_path / "modules"
    package_dir.mkdir()
    (package_dir / "fake_agent_runtime.py").write_text(RUNTIME_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(package_dir))
    monkeypatch.delitem(sys.modules, "fake_agent_runtime", raising=False)
    return "fake_agent_runtime"


class TestAgentDaemon:
    def test_invalid_entry_point(self):
        with pytest.raises(DaemonStartError, match="Invalid"):
            load_entry_point("no_colon_here")

    def test_missing_module(self):
        with pytest.raises(DaemonStartError, match="Cannot import"):
            load_entry_point("nerovaagent_no_such_module:serve")

    def test_missing_attribute(self, runtime_module):
        with pytest.raises(DaemonStartError, match="not found"):
            load_entry_point(f"{runtime_module}:nope")

    @pytest.mark.asyncio
    async def test_no_runtime_configured(self, manager):
        with pytest.raises(DaemonStartError, match="No agent runtime"):
            await boot_daemon({"daemon": {"runtime": None}}, manager)

    @pytest.mark.asyncio
    async def test_boot_runs_runtime_and_clears_pid(self, manager, runtime_module):
        spec = f"{runtime_module}:serve"
        code = await boot_daemon({"daemon": {"runtime": spec}}, manager)
        assert code == 0
        assert sys.modules[runtime_module].calls == [spec]
        assert not manager.pid_path.exists()

    @pytest.mark.asyncio
    async def test_async_runtime_awaited(self, manager, runtime_module):
        await boot_daemon({"daemon": {"runtime": f"{runtime_module}:serve_async"}}, manager)
        assert sys.modules[runtime_module].calls == ["async"]

    @pytest.mark.asyncio
    async def test_pid_cleared_on_crash(self, manager, runtime_module):
        with pytest.raises(RuntimeError, match="boom"):
            await boot_daemon({"daemon": {"runtime": f"{runtime_module}:explode"}}, manager)
        assert not manager.pid_path.exists()
