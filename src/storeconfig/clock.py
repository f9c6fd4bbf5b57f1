"""Injectable time source.

Every component that needs "now" takes a ``clock`` callable returning an
aware UTC datetime, so tests can pin or advance time deterministically.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

ClockSource = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
