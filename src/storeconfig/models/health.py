"""Health and downstream timestamp payloads."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from storeconfig.models._base import StoreBaseModel


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    STALE = "stale"
    UNAVAILABLE = "unavailable"


class HealthReport(StoreBaseModel):
    """Cache health as exposed to admin callers.

    Serialize with ``model_dump(mode="json", by_alias=True)`` for the
    camelCase wire shape.
    """

    status: HealthStatus
    total_entities: int = 0
    last_refresh: datetime | None = None
    age_seconds: float = 0.0
    last_error: str | None = None
    refresh_in_flight: bool = False
    skipped_records: int = 0


class BusinessTimestamps(StoreBaseModel):
    """The business-date / modified-time / offset triple for SOAP requests."""

    business_date: str
    modified_time_local: str
    offset_minutes: int
