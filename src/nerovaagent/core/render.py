"""Run-result rendering and exit status.

Turns whatever ``/run/start`` returned into a deterministic, line-oriented
report. Rendering is a pure function of the payload: printing is left to
the caller, which makes the same payload always produce the same report.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from ..models.run import RunResult, StepResult, TargetHints, TimelineEntry

PREFIX = "[nerovaagent]"

# Closed on purpose: any other effective status fails the invocation.
SUCCESS_STATUSES = frozenset({"completed"})


@dataclass(frozen=True)
class RunReport:
    lines: tuple[str, ...]
    diagnostics: tuple[str, ...] = ()
    exit_code: int = 0


def serialize(value: Any) -> str:
    """Compact JSON, the way the daemon's own clients print payloads."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def as_text(value: Any) -> str:
    """Render a loosely-typed scalar for inline display."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return serialize(value)


def first_non_empty(*candidates: Any) -> Optional[Any]:
    """Return the first truthy candidate, in argument order."""
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def effective_status(run: RunResult) -> str:
    if run.status:
        return as_text(run.status)
    return "completed" if run.ok else "unknown"


def target_label(hints: TargetHints) -> str:
    """Exact texts joined, else the partial text, else the first 'contains' text."""
    exact = " | ".join(as_text(text) for text in hints.text_exact) if hints.text_exact else ""
    contains = hints.text_contains[0] if hints.text_contains else None
    return as_text(first_non_empty(exact, hints.text_partial, contains))


def _step_lines(entry: TimelineEntry) -> list[str]:
    lines = []
    iteration = "?" if entry.iteration is None else as_text(entry.iteration)
    decision = entry.decision
    target = decision.target if decision is not None else None

    action = as_text(decision.action) if decision is not None and decision.action else "none"
    reason = ""
    if decision is not None:
        reason = as_text(
            first_non_empty(
                decision.reason,
                decision.summary,
                target.reason if target is not None else None,
            )
        )
    lines.append(f" step {iteration}: action={action}" + (f" :: {reason}" if reason else ""))

    if target is not None:
        label = target_label(target.hints or TargetHints())
        if label:
            lines.append(f"   target: {label}")

    result = entry.result or StepResult()
    if result.next and result.next != "continue":
        suffix = f" reason={as_text(result.reason)}" if result.reason else ""
        lines.append(f"   result: next={as_text(result.next)}{suffix}")
    elif result.clicked is not None:
        clicked = result.clicked
        name = as_text(first_non_empty(clicked.name, clicked.id)) or "candidate"
        state = as_text(clicked.hit_state) or "n/a"
        lines.append(f"   clicked: {name} (state={state})")

    if entry.assistant is not None:
        output = first_non_empty(entry.assistant.parsed, entry.assistant.raw)
        text = output if isinstance(output, str) else serialize(output)
        lines.append(f"   assistant: {text}")

    return lines


def render_run_result(payload: Any) -> RunReport:
    """Build the report and exit code for a run payload.

    A JSON array is judged like an object with no fields. Any other
    non-object payload is echoed as-is and counts as a success, since there
    is no status to judge it by.
    """
    if isinstance(payload, RunResult):
        run = payload
    elif isinstance(payload, dict):
        run = RunResult.model_validate(payload)
    elif isinstance(payload, list):
        run = RunResult()
    else:
        return RunReport(lines=(f"Agent response: {serialize(payload)}",))

    status = effective_status(run)
    iterations = "n/a" if run.iterations is None else as_text(run.iterations)
    agent_id = run.agent.id if run.agent is not None else None
    agent = "unknown" if agent_id is None else as_text(agent_id)

    lines = [f"{PREFIX} status={status} iterations={iterations} agent={agent}"]
    if not run.timeline:
        lines.append(f"{PREFIX} timeline: <empty>")
    for entry in run.timeline:
        lines.extend(_step_lines(entry))

    if run.complete_history:
        history = " | ".join(as_text(item) for item in run.complete_history)
        lines.append(f" complete history: {history}")

    if status in SUCCESS_STATUSES:
        return RunReport(lines=tuple(lines))
    return RunReport(
        lines=tuple(lines),
        diagnostics=(f"{PREFIX} run finished with status {status}. Inspect timeline for details.",),
        exit_code=1,
    )
