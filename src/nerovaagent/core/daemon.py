"""Agent daemon presence: probe, ensure, and the precondition gate."""

from __future__ import annotations

import asyncio
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ..errors import DaemonNotRunningError, DaemonStartError

PID_FILE = "agent-daemon.pid"
LOG_FILE = "agent-daemon.log"


@runtime_checkable
class DaemonManager(Protocol):
    """Protocol that all daemon managers must implement."""

    async def is_running(self) -> bool: ...

    async def ensure(self, config: dict) -> int: ...


async def require_daemon(manager: DaemonManager) -> None:
    """Gate for commands that submit work. Never starts anything."""
    if not await manager.is_running():
        raise DaemonNotRunningError()


def _process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # exists, owned by someone else
        return True
    return True


class PidFileDaemonManager:
    """Tracks the daemon through <home>/agent-daemon.pid."""

    def __init__(self, home: Path, boot_timeout_seconds: float = 15, poll_interval: float = 0.1):
        self.home = Path(home)
        self.boot_timeout = boot_timeout_seconds
        self.poll_interval = poll_interval

    @property
    def pid_path(self) -> Path:
        return self.home / PID_FILE

    @property
    def log_path(self) -> Path:
        return self.home / LOG_FILE

    def read_pid(self) -> Optional[int]:
        try:
            return int(self.pid_path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

    def write_pid(self, pid: int) -> None:
        self.home.mkdir(parents=True, exist_ok=True)
        self.pid_path.write_text(f"{pid}\n", encoding="utf-8")

    def clear_pid(self, pid: Optional[int] = None) -> None:
        """Remove the pid file, only if it still names ``pid`` when given."""
        if pid is not None and self.read_pid() != pid:
            return
        self.pid_path.unlink(missing_ok=True)

    def running_pid(self) -> Optional[int]:
        pid = self.read_pid()
        if pid is not None and _process_alive(pid):
            return pid
        return None

    async def is_running(self) -> bool:
        return self.running_pid() is not None

    def spawn_command(self) -> list[str]:
        return [sys.executable, "-m", "nerovaagent", "agent-daemon"]

    async def ensure(self, config: dict) -> int:
        pid = self.running_pid()
        if pid is not None:
            return pid

        env = dict(os.environ)
        origin = config.get("runtime", {}).get("origin")
        if origin:
            env["NEROVA_AGENT_ORIGIN"] = origin
        env["NEROVA_AGENT_HOME"] = str(self.home)

        try:
            self.clear_pid()
            self.home.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("ab") as log:
                process = subprocess.Popen(
                    self.spawn_command(),
                    stdin=subprocess.DEVNULL,
                    stdout=log,
                    stderr=subprocess.STDOUT,
                    env=env,
                    start_new_session=True,
                )
        except OSError as e:
            raise DaemonStartError(f"Could not spawn agent daemon: {e}") from e

        deadline = time.monotonic() + self.boot_timeout
        while time.monotonic() < deadline:
            pid = self.running_pid()
            if pid is not None:
                return pid
            code = process.poll()
            if code is not None:
                raise DaemonStartError(
                    f"Agent daemon exited during startup (code {code})",
                    hint=f"See {self.log_path}",
                )
            await asyncio.sleep(self.poll_interval)

        raise DaemonStartError(
            f"Agent daemon did not come up within {self.boot_timeout}s",
            hint=f"See {self.log_path}",
        )


def get_daemon_manager(config: dict) -> PidFileDaemonManager:
    daemon_config = config.get("daemon", {})
    return PidFileDaemonManager(
        home=Path(daemon_config.get("home", "~/.nerovaagent")).expanduser(),
        boot_timeout_seconds=float(daemon_config.get("boot_timeout_seconds", 15)),
    )
