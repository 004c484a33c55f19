"""HTTP runtime client for the local agent daemon."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..errors import RequestError
from ..utils.console import debug_line
from ..utils.sanitize import redact_payload, sanitize_error


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(response: httpx.Response, data: Any) -> str:
    if isinstance(data, dict):
        for key in ("error", "message"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


class HttpRuntimeClient:
    def __init__(
        self,
        origin: str,
        timeout_seconds: float = 600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        debug: bool = False,
    ):
        self.origin = origin.rstrip("/")
        self.timeout = timeout_seconds
        self.transport = transport
        self.debug = debug

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[dict] = None,
    ) -> Any:
        url = f"{self.origin}{path}"
        if self.debug:
            debug_line(f"-> {method} {path}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, json=body)
        except httpx.HTTPError as e:
            raise RequestError(sanitize_error(str(e)) or type(e).__name__) from e

        if self.debug:
            debug_line(f"<- {response.status_code}")

        data = _decode(response)
        if response.is_error:
            raise RequestError(
                sanitize_error(_error_message(response, data)),
                data=redact_payload(data),
                status_code=response.status_code,
            )
        return data
