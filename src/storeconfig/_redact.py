"""Helpers for safe logging.

Location tokens are credentials against the POS vendor, and source rows
may carry database connection details. This module masks them before
they reach logs or error payloads.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_TOKEN_PREFIX = 10

_TOKEN_KEYS: frozenset[str] = frozenset({"token", "locationtoken", "location_token"})

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "pwd",
        "accesstoken",
        "access_token",
        "authorization",
        "connectionstring",
        "database_url",
    }
)


def mask_token(token: str | None) -> str:
    """Return the first characters of *token* followed by ``...``."""
    if not token:
        return "<none>"
    if len(token) <= _TOKEN_PREFIX:
        return f"{token[:2]}..."
    return f"{token[:_TOKEN_PREFIX]}..."


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _TOKEN_KEYS and isinstance(v, str):
                redacted[key] = mask_token(v)
            elif lowered in _SENSITIVE_VALUE_KEYS or lowered in _TOKEN_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
