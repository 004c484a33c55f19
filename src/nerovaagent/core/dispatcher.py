"""Command routing for the nerovaagent CLI.

The first token picks one :class:`Command`; everything after it goes to the
option resolver. Each command has exactly one async handler returning the
process exit code. Known errors are reported here; anything else escapes to
the click entry point.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from ..errors import DaemonStartError, NerovaAgentError, RequestError
from ..runtime.base import RuntimeClient, get_runtime_client
from ..utils.console import emit, emit_error
from ..utils.sanitize import redact_secrets
from .config import get_effective_config
from .daemon import DaemonManager, get_daemon_manager, require_daemon
from .options import ParsedOptions, build_run_request, parse_args
from .render import render_run_result, serialize

SUCCESS = 0
FAILURE = 1

USAGE = """nerovaagent commands:
  (no command)                      Activate the local agent daemon
  playwright-launch                 Warm the local Playwright runtime
  start <prompt|string>             Kick off a run with the given prompt
    --prompt-file <path>            Read prompt from a file
    --prompt <string>               Pass the prompt explicitly
    --context <string>              Supply additional context notes for the run
    --context-file <path>           Load context notes from a file
    --critic-key <key>              Override critic OpenAI key
    --assistant-key <key>           Override Step 4 assistant key
    --assistant-id <id>             Override Step 4 assistant id
  status                            Fetch runtime status
  agent-daemon                      Run the agent daemon in this process
  help                              Show this message
"""


class Command(str, Enum):
    ACTIVATE = "activate"
    PLAYWRIGHT_LAUNCH = "playwright-launch"
    START = "start"
    STATUS = "status"
    HELP = "help"
    AGENT_DAEMON = "agent-daemon"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, token: Optional[str]) -> Command:
        if token is None:
            return cls.ACTIVATE
        if token in ("--help", "-h"):
            return cls.HELP
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class Invocation:
    token: Optional[str]
    options: ParsedOptions
    config: dict
    client: RuntimeClient
    daemon: DaemonManager


def _report_request_failure(prefix: str, exc: RequestError) -> None:
    emit_error(f"{prefix}: {exc}")
    if exc.data is not None:
        data = exc.data if isinstance(exc.data, str) else serialize(exc.data)
        emit_error(f"Runtime response: {data}")


async def handle_activate(inv: Invocation) -> int:
    try:
        pid = await inv.daemon.ensure(inv.config)
    except DaemonStartError as e:
        emit_error(f"Failed to activate agent daemon: {redact_secrets(str(e))}")
        if e.hint:
            emit_error(e.hint, style="yellow")
        return FAILURE
    emit(f"[nerovaagent] agent daemon running (pid {pid})", style="green")
    emit(
        "[nerovaagent] You can now run `nerovaagent playwright-launch` "
        'or `nerovaagent start "<prompt>"`.'
    )
    return SUCCESS


async def handle_playwright_launch(inv: Invocation) -> int:
    await require_daemon(inv.daemon)
    try:
        result = await inv.client.request("/runtime/playwright/launch", method="POST")
    except RequestError as e:
        _report_request_failure("Failed to warm Playwright runtime", e)
        return FAILURE
    emit(f"Playwright ready: {serialize(result)}")
    return SUCCESS


async def handle_start(inv: Invocation) -> int:
    run_request = build_run_request(inv.options, inv.config)
    await require_daemon(inv.daemon)
    try:
        result = await inv.client.request("/run/start", method="POST", body=run_request.to_payload())
    except RequestError as e:
        _report_request_failure("Failed to start agent", e)
        return FAILURE

    report = render_run_result(result)
    for line in report.lines:
        emit(line)
    for line in report.diagnostics:
        emit_error(line)
    return report.exit_code


async def handle_status(inv: Invocation) -> int:
    try:
        result = await inv.client.request("/healthz", method="GET")
    except RequestError as e:
        emit_error(f"Runtime not reachable: {e}")
        return FAILURE
    emit(f"Runtime status: {serialize(result)}")
    return SUCCESS


async def handle_help(inv: Invocation) -> int:
    emit(USAGE.rstrip("\n"))
    return SUCCESS


async def handle_agent_daemon(inv: Invocation) -> int:
    from .agent_daemon import boot_daemon

    return await boot_daemon(inv.config, get_daemon_manager(inv.config))


async def handle_unknown(inv: Invocation) -> int:
    emit_error(f"Unknown command: {inv.token}")
    emit(USAGE.rstrip("\n"))
    return FAILURE


HANDLERS: dict[Command, Callable[[Invocation], Awaitable[int]]] = {
    Command.ACTIVATE: handle_activate,
    Command.PLAYWRIGHT_LAUNCH: handle_playwright_launch,
    Command.START: handle_start,
    Command.STATUS: handle_status,
    Command.HELP: handle_help,
    Command.AGENT_DAEMON: handle_agent_daemon,
    Command.UNKNOWN: handle_unknown,
}


async def dispatch(
    argv: Sequence[str],
    *,
    environ: Optional[Mapping[str, str]] = None,
    client: Optional[RuntimeClient] = None,
    daemon: Optional[DaemonManager] = None,
) -> int:
    """Run one command and return its exit code."""
    token = argv[0] if argv else None
    command = Command.parse(token)
    config = get_effective_config(environ)
    inv = Invocation(
        token=token,
        options=parse_args(argv[1:]),
        config=config,
        client=client or get_runtime_client(config),
        daemon=daemon or get_daemon_manager(config),
    )

    try:
        return await HANDLERS[command](inv)
    except NerovaAgentError as e:
        emit_error(redact_secrets(str(e)))
        if e.hint:
            emit_error(e.hint, style="yellow")
        return FAILURE
