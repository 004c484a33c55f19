"""Runtime client abstraction.

The agent daemon is reached through a single request operation. Clients make
at most one attempt per call; re-running is left to the operator.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class RuntimeClient(Protocol):
    """Protocol that all runtime clients must implement."""

    origin: str

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[dict] = None,
    ) -> Any: ...


def get_runtime_client(config: dict) -> RuntimeClient:
    """Factory function to create the configured runtime client."""
    from .http import HttpRuntimeClient

    runtime_config = config.get("runtime", {})
    return HttpRuntimeClient(
        origin=runtime_config.get("origin", "http://127.0.0.1:3333"),
        timeout_seconds=runtime_config.get("timeout_seconds", 600),
        debug=bool(config.get("debug", False)),
    )
