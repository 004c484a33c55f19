"""Exception hierarchy for nerovaagent.

Every failure the dispatcher knows how to report derives from
:class:`NerovaAgentError`. Anything else is treated as unexpected by the
click entry point.
"""

from __future__ import annotations

from typing import Any, Optional


class NerovaAgentError(Exception):
    """Base exception for all nerovaagent errors."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class FileReadError(NerovaAgentError):
    """A prompt or context file could not be read."""

    def __init__(self, path: str, cause: str) -> None:
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause


class MissingPromptError(NerovaAgentError):
    """No non-empty prompt could be resolved for ``start``."""

    def __init__(self) -> None:
        super().__init__(
            "A prompt is required. Pass as argument or use --prompt/--prompt-file."
        )


class DaemonNotRunningError(NerovaAgentError):
    """A work-submitting command found no live agent daemon."""

    def __init__(self) -> None:
        super().__init__(
            "No active nerova agent daemon detected. "
            "Run `nerovaagent` first to activate it."
        )


class DaemonStartError(NerovaAgentError):
    """The agent daemon could not be started or booted."""


class RequestError(NerovaAgentError):
    """A runtime request failed.

    ``data`` carries the decoded service-side error body when the daemon
    answered at all.
    """

    def __init__(
        self,
        message: str,
        *,
        data: Any = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.data = data
        self.status_code = status_code
