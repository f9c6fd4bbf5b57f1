"""Timezone and business-date resolution.

This module is the single place that turns a UTC instant into a
location's wall-clock time, its UTC offset, and its restaurant business
date. Callers must never hardcode an offset: the offset is looked up in
the IANA database for the instant in question, so DST is always honoured.
"""

from __future__ import annotations

import functools
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from storeconfig._constants import BUSINESS_DATE_FORMAT, DEFAULT_CUTOFF_HOUR, MODIFIED_TIME_FORMAT
from storeconfig.clock import ClockSource, ensure_aware, utcnow
from storeconfig.exceptions import InvalidZoneError
from storeconfig.models.health import BusinessTimestamps


@functools.lru_cache(maxsize=256)
def get_zone(name: str) -> ZoneInfo:
    """Return the :class:`ZoneInfo` for *name*.

    Raises
    ------
    InvalidZoneError
        If *name* is not a recognized IANA identifier.
    """
    key = name.strip() if isinstance(name, str) else ""
    if not key:
        raise InvalidZoneError("Empty timezone identifier", zone=str(name))
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidZoneError(f"Unknown timezone {key!r}", zone=key) from exc


class TimezoneResolver:
    """Resolve local time, UTC offset and business date for a zone.

    Parameters
    ----------
    cutoff_hour : int
        Local hour at which the business day rolls over. Instants before
        this hour belong to the previous calendar day's business date;
        the cutoff hour itself starts the new business day.
    clock : ClockSource
        Supplies "now" when no instant is passed.
    """

    def __init__(self, *, cutoff_hour: int = DEFAULT_CUTOFF_HOUR, clock: ClockSource = utcnow) -> None:
        if not 0 <= cutoff_hour <= 23:
            raise ValueError(f"cutoff_hour must be between 0 and 23, got {cutoff_hour}")
        self._cutoff_hour = cutoff_hour
        self._clock = clock

    @property
    def cutoff_hour(self) -> int:
        return self._cutoff_hour

    def _instant(self, instant: datetime | None) -> datetime:
        return ensure_aware(instant if instant is not None else self._clock())

    def local_time(self, zone: str, instant: datetime | None = None) -> datetime:
        """Wall-clock time in *zone* at *instant* (aware datetime)."""
        return self._instant(instant).astimezone(get_zone(zone))

    def utc_offset_minutes(self, zone: str, instant: datetime | None = None) -> int:
        """Signed UTC offset in minutes; zones west of UTC are negative.

        Fractional-hour zones keep their minutes (``Asia/Kolkata`` is 330).
        """
        offset = self.local_time(zone, instant).utcoffset() or timedelta(0)
        return round(offset.total_seconds() / 60)

    def business_date(self, zone: str, instant: datetime | None = None) -> date:
        local = self.local_time(zone, instant)
        if local.hour < self._cutoff_hour:
            return local.date() - timedelta(days=1)
        return local.date()

    def business_timestamps(self, zone: str, instant: datetime | None = None) -> BusinessTimestamps:
        """Fields a SOAP sales/labor request needs for *zone* at *instant*."""
        moment = self._instant(instant)
        local = self.local_time(zone, moment)
        return BusinessTimestamps(
            business_date=self.business_date(zone, moment).strftime(BUSINESS_DATE_FORMAT),
            modified_time_local=local.strftime(MODIFIED_TIME_FORMAT),
            offset_minutes=self.utc_offset_minutes(zone, moment),
        )
