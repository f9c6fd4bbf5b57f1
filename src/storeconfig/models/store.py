"""Store configuration models."""

from __future__ import annotations

import re

from pydantic import Field, field_validator, model_validator

from storeconfig._constants import DEFAULT_CLOSING_HOUR, DEFAULT_OPENING_HOUR, WEEKDAYS
from storeconfig.models._base import StoreBaseModel, StoreTimestamp

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def _normalize_hhmm(value: str) -> str:
    """Normalize ``H:MM`` / ``HH:MM`` to zero-padded ``HH:MM``.

    Zero padding keeps plain string comparison equivalent to time
    comparison.
    """
    match = _HHMM.match(value.strip())
    if match is None:
        raise ValueError(f"expected HH:MM, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"time out of range: {value!r}")
    return f"{hour:02d}:{minute:02d}"


class DayHours(StoreBaseModel):
    """Opening window for one weekday, local wall-clock ``HH:MM``."""

    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def _validate_hhmm(cls, value: str) -> str:
        return _normalize_hhmm(value)

    @model_validator(mode="after")
    def _no_overnight(self) -> DayHours:
        if self.open > self.close:
            raise ValueError(f"overnight hours are not supported ({self.open}-{self.close})")
        return self


class StoreConfig(StoreBaseModel):
    """Configuration for one physical location.

    Parameters
    ----------
    id : str
        Vendor-assigned location identifier.
    location_token : str
        Opaque, case-sensitive lookup key issued by the POS vendor.
    name : str
        Display name.
    timezone : str
        IANA zone name (e.g. ``"America/Denver"``). Not validated here;
        an unknown zone surfaces as :class:`~storeconfig.exceptions.InvalidZoneError`
        when a business date is computed for the store.
    opening_hour, closing_hour : int
        Whole-hour fallback used when ``daily_hours`` is absent.
    daily_hours : dict or None
        Per-weekday opening windows keyed by lowercase English weekday.
    """

    id: str
    location_token: str
    name: str
    timezone: str
    state: str | None = None
    region: str | None = None
    opening_hour: int = Field(default=DEFAULT_OPENING_HOUR, ge=0, le=23)
    closing_hour: int = Field(default=DEFAULT_CLOSING_HOUR, ge=0, le=23)
    daily_hours: dict[str, DayHours] | None = None
    address: str | None = None
    phone: str | None = None
    store_url: str | None = None
    google_maps_url: str | None = None
    manager: str | None = None
    last_updated: StoreTimestamp = None
    is_active: bool = True

    @field_validator("daily_hours", mode="before")
    @classmethod
    def _normalize_weekdays(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        normalized: dict[str, object] = {}
        for key, hours in value.items():
            day = str(key).strip().lower()
            if day not in WEEKDAYS:
                raise ValueError(f"unknown weekday {key!r}")
            normalized[day] = hours
        return normalized

    @field_validator("timezone")
    @classmethod
    def _strip_zone(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _check_fallback_hours(self) -> StoreConfig:
        if self.opening_hour >= self.closing_hour:
            raise ValueError(
                f"opening_hour ({self.opening_hour}) must be before closing_hour ({self.closing_hour})"
            )
        return self

    def hours_for(self, weekday: str) -> DayHours | None:
        """Detailed hours for *weekday*, or ``None``."""
        if self.daily_hours is None:
            return None
        return self.daily_hours.get(weekday.strip().lower())

    @property
    def has_detailed_hours(self) -> bool:
        return bool(self.daily_hours)

    @property
    def has_location_data(self) -> bool:
        return bool(self.address and self.phone)
