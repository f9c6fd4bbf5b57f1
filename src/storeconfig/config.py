"""Settings for storeconfig."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from storeconfig._constants import DEFAULT_CACHE_TTL, DEFAULT_CUTOFF_HOUR, DEFAULT_LOAD_TIMEOUT
from storeconfig.exceptions import StoreConfigSettingsError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise StoreConfigSettingsError(f"{key} must be a number, got {value!r}") from exc


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise StoreConfigSettingsError(f"{key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DatabaseSettings:
    """Connection details for the relational store.

    Either ``url`` (any SQLAlchemy async URL) or ``server`` + ``database``
    must be set. With the latter an ``mssql+aioodbc`` URL is assembled;
    without ``user`` the ODBC driver authenticates with the managed
    identity.
    """

    url: str | None = None
    server: str | None = None
    database: str | None = None
    user: str | None = None
    password: str | None = None
    driver: str = "ODBC Driver 18 for SQL Server"

    @property
    def is_configured(self) -> bool:
        return bool(self.url or (self.server and self.database))


@dataclasses.dataclass(frozen=True)
class StoreConfigSettings:
    """Service settings.

    Parameters
    ----------
    database : DatabaseSettings
        Where store configuration rows are read from.
    cache_ttl : float
        Snapshot time-to-live in seconds. Defaults to 15 minutes.
    load_timeout : float
        Upper bound for one configuration load in seconds. ``0`` disables
        the timeout.
    cutoff_hour : int
        Local hour at which the restaurant business day rolls over.
    cache_file : Path or None
        Optional on-disk snapshot used to warm-start the cache.
    admin_host, admin_port : str, int
        Bind address of the admin HTTP surface.
    """

    database: DatabaseSettings = dataclasses.field(default_factory=DatabaseSettings)
    cache_ttl: float = DEFAULT_CACHE_TTL.total_seconds()
    load_timeout: float = DEFAULT_LOAD_TIMEOUT
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR
    cache_file: Path | None = None
    admin_host: str = "127.0.0.1"
    admin_port: int = 8085

    def __post_init__(self) -> None:
        if self.cache_ttl <= 0:
            raise StoreConfigSettingsError(f"cache_ttl must be positive, got {self.cache_ttl}")
        if self.load_timeout < 0:
            raise StoreConfigSettingsError(f"load_timeout must not be negative, got {self.load_timeout}")
        if not 0 <= self.cutoff_hour <= 23:
            raise StoreConfigSettingsError(f"cutoff_hour must be between 0 and 23, got {self.cutoff_hour}")

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfigSettings:
        """Create settings from environment variables.

        Reads ``STORECONFIG_*`` variables plus the ``DB_SERVER``,
        ``DB_NAME``, ``DB_USER`` and ``DB_PASSWORD`` variables the function
        host already defines. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        database = overrides.pop("database", None)
        if isinstance(database, dict):
            database = DatabaseSettings(**database)
        if database is None:
            database = DatabaseSettings(
                url=env.get("STORECONFIG_DATABASE_URL") or None,
                server=env.get("DB_SERVER") or None,
                database=env.get("DB_NAME") or None,
                user=env.get("DB_USER") or None,
                password=env.get("DB_PASSWORD") or None,
                driver=env.get("DB_ODBC_DRIVER") or DatabaseSettings.driver,
            )

        kwargs: dict[str, Any] = {"database": database}

        ttl = _env_float(env, "STORECONFIG_CACHE_TTL")
        if ttl is not None:
            kwargs["cache_ttl"] = ttl

        timeout = _env_float(env, "STORECONFIG_LOAD_TIMEOUT")
        if timeout is not None:
            kwargs["load_timeout"] = timeout

        cutoff = _env_int(env, "STORECONFIG_CUTOFF_HOUR")
        if cutoff is not None:
            kwargs["cutoff_hour"] = cutoff

        cache_file = env.get("STORECONFIG_CACHE_FILE")
        if cache_file:
            kwargs["cache_file"] = Path(cache_file)

        host = env.get("STORECONFIG_ADMIN_HOST")
        if host:
            kwargs["admin_host"] = host

        port = _env_int(env, "STORECONFIG_ADMIN_PORT")
        if port is not None:
            kwargs["admin_port"] = port

        kwargs.update(overrides)

        return cls(**kwargs)
