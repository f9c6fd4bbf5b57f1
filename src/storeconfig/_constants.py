"""Internal constants shared across the library."""

from __future__ import annotations

from datetime import timedelta

#: Snapshot time-to-live before a refresh is due.
DEFAULT_CACHE_TTL = timedelta(minutes=15)

#: Upper bound for a single configuration load, in seconds.
DEFAULT_LOAD_TIMEOUT: float = 5.0

#: Local hour at which a new restaurant business day starts.
DEFAULT_CUTOFF_HOUR = 5

#: Fallback hours used when the source row leaves them null.
DEFAULT_OPENING_HOUR = 10
DEFAULT_CLOSING_HOUR = 22

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# ------------------------------------------------------------------
# Wire formats
# ------------------------------------------------------------------

BUSINESS_DATE_FORMAT = "%Y-%m-%d"
MODIFIED_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
