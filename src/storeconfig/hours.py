"""Opening-hours helpers evaluated in a store's local timezone."""

from __future__ import annotations

from datetime import date, datetime

from storeconfig._constants import WEEKDAYS
from storeconfig.models.store import StoreConfig
from storeconfig.timezone import TimezoneResolver


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def hours_for_date(store: StoreConfig, day: date) -> tuple[int, int]:
    """Whole-hour ``(open, close)`` window for *day*.

    Detailed hours for the weekday win when present; otherwise the fallback
    ``opening_hour``/``closing_hour`` apply.
    """
    hours = store.hours_for(weekday_name(day))
    if hours is None:
        return store.opening_hour, store.closing_hour
    return int(hours.open[:2]), int(hours.close[:2])


def is_open_at(store: StoreConfig, instant: datetime, resolver: TimezoneResolver) -> bool:
    """Whether *store* is open at *instant*, judged on its local wall clock.

    Raises
    ------
    InvalidZoneError
        If the store's timezone is not recognized.
    """
    local = resolver.local_time(store.timezone, instant)
    if store.daily_hours is None:
        return store.opening_hour <= local.hour < store.closing_hour
    hours = store.hours_for(weekday_name(local.date()))
    if hours is None:
        return False
    return hours.open <= local.strftime("%H:%M") < hours.close
