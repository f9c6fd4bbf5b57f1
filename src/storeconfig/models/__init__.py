"""Data models for storeconfig."""

from storeconfig.models._base import StoreBaseModel, StoreTimestamp, parse_timestamp
from storeconfig.models.health import BusinessTimestamps, HealthReport, HealthStatus
from storeconfig.models.snapshot import CacheSnapshot
from storeconfig.models.store import DayHours, StoreConfig

__all__ = [
    "BusinessTimestamps",
    "CacheSnapshot",
    "DayHours",
    "HealthReport",
    "HealthStatus",
    "StoreBaseModel",
    "StoreConfig",
    "StoreTimestamp",
    "parse_timestamp",
]
