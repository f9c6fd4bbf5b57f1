"""storeconfig - Store configuration cache and business-date resolution."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("storeconfig")
except PackageNotFoundError:
    __version__ = "0+local"
from storeconfig.cache import CacheStore
from storeconfig.clock import ClockSource, utcnow
from storeconfig.config import DatabaseSettings, StoreConfigSettings
from storeconfig.exceptions import (
    DuplicateTokenError,
    InvalidZoneError,
    MalformedRecordError,
    SourceUnavailableError,
    StoreConfigError,
    StoreConfigSettingsError,
)
from storeconfig.hours import hours_for_date, is_open_at
from storeconfig.loader import ConfigLoader, ConfigSource, parse_store_row
from storeconfig.models import (
    BusinessTimestamps,
    CacheSnapshot,
    DayHours,
    HealthReport,
    HealthStatus,
    StoreConfig,
)
from storeconfig.persistence import SnapshotFile
from storeconfig.service import StoreConfigService
from storeconfig.timezone import TimezoneResolver

__all__ = [
    "__version__",
    "BusinessTimestamps",
    "CacheSnapshot",
    "CacheStore",
    "ClockSource",
    "ConfigLoader",
    "ConfigSource",
    "DatabaseSettings",
    "DayHours",
    "DuplicateTokenError",
    "HealthReport",
    "HealthStatus",
    "InvalidZoneError",
    "MalformedRecordError",
    "SnapshotFile",
    "SourceUnavailableError",
    "StoreConfig",
    "StoreConfigError",
    "StoreConfigService",
    "StoreConfigSettings",
    "StoreConfigSettingsError",
    "TimezoneResolver",
    "hours_for_date",
    "is_open_at",
    "parse_store_row",
    "utcnow",
]
