"""In-process boot of the agent daemon (``nerovaagent agent-daemon``).

The agent runtime itself lives outside this package and is named by the
``daemon.runtime`` setting as ``"module:callable"``. Booting records this
process in the pid file, hands the config to the runtime, and clears the
pid file once the runtime returns.
"""

from __future__ import annotations

import importlib
import inspect
import os
from typing import Any, Callable

from ..errors import DaemonStartError
from .daemon import PidFileDaemonManager


def load_entry_point(spec: str) -> Callable[..., Any]:
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise DaemonStartError(
            f"Invalid daemon runtime entry point: {spec!r}",
            hint="Use the form 'package.module:callable'.",
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise DaemonStartError(f"Cannot import agent runtime {module_name}: {e}") from e

    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise DaemonStartError(f"Agent runtime {spec} not found")
    if not callable(target):
        raise DaemonStartError(f"Agent runtime {spec} is not callable")
    return target


async def boot_daemon(config: dict, manager: PidFileDaemonManager) -> int:
    spec = config.get("daemon", {}).get("runtime")
    if not spec:
        raise DaemonStartError(
            "No agent runtime configured",
            hint="Set daemon.runtime in config.yaml or NEROVA_AGENT_RUNTIME.",
        )
    runtime = load_entry_point(str(spec))

    pid = os.getpid()
    manager.write_pid(pid)
    try:
        outcome = runtime(config)
        if inspect.isawaitable(outcome):
            await outcome
    finally:
        manager.clear_pid(pid)
    return 0
