"""Redaction of credentials before runtime errors reach the terminal."""

from __future__ import annotations

import os
import re
from typing import Any

_SECRET_FIELDS = {"criticKey", "assistantKey", "critic_key", "assistant_key", "apiKey", "api_key"}


def redact_secrets(message: str) -> str:
    """Mask API keys and auth tokens; everything else is left as written."""
    if not message:
        return message

    sanitized = message
    sanitized = re.sub(r"sk-ant-[a-zA-Z0-9_-]+", "[REDACTED_KEY]", sanitized)
    sanitized = re.sub(r"sk-[a-zA-Z0-9_-]{20,}", "[REDACTED_KEY]", sanitized)
    sanitized = re.sub(r"Bearer\s+\S+", "Bearer [REDACTED]", sanitized)
    sanitized = re.sub(r"Authorization:\s*\S+", "Authorization: [REDACTED]", sanitized)
    return sanitized


def sanitize_error(message: str) -> str:
    """Sanitize transport error messages to prevent API key and path leakage."""
    sanitized = redact_secrets(message)
    if not sanitized:
        return sanitized

    home = os.environ.get("USERPROFILE") or os.environ.get("HOME") or ""
    if home and home != os.sep:
        sanitized = sanitized.replace(home, "[USER_HOME]")

    return sanitized


def redact_payload(data: Any) -> Any:
    """Return a copy of a decoded response body with key fields masked."""
    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if key in _SECRET_FIELDS and value else redact_payload(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_payload(item) for item in data]
    return data
