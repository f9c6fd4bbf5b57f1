"""Store-configuration service: the entry point other components use."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any

from storeconfig._constants import DEFAULT_CACHE_TTL
from storeconfig._redact import mask_token
from storeconfig._sql import SqlConfigSource
from storeconfig.cache import CacheStore
from storeconfig.clock import ClockSource, utcnow
from storeconfig.config import StoreConfigSettings
from storeconfig.exceptions import StoreConfigError
from storeconfig.loader import ConfigLoader
from storeconfig.models.health import BusinessTimestamps, HealthReport
from storeconfig.models.store import StoreConfig
from storeconfig.persistence import SnapshotFile
from storeconfig.timezone import TimezoneResolver

_logger = logging.getLogger(__name__)


class StoreConfigService:
    """Lookup facade over the store cache.

    Reads refresh the cache transparently when it is stale; a failed
    refresh degrades freshness, never availability, and is reported through
    :meth:`health` instead of an exception.

    Usage::

        async with StoreConfigService.from_settings(StoreConfigSettings.from_env()) as service:
            store = await service.get(location_token)
    """

    def __init__(
        self,
        loader: ConfigLoader,
        *,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: ClockSource = utcnow,
        resolver: TimezoneResolver | None = None,
        snapshot_file: SnapshotFile | None = None,
    ) -> None:
        self._loader = loader
        self._cache = CacheStore(loader, ttl=ttl, clock=clock, snapshot_file=snapshot_file)
        self._resolver = resolver if resolver is not None else TimezoneResolver(clock=clock)
        self._snapshot_file = snapshot_file
        self._warm_start_attempted = False

    @classmethod
    def from_settings(cls, settings: StoreConfigSettings, *, clock: ClockSource = utcnow) -> StoreConfigService:
        """Compose a service reading from the configured SQL database."""
        loader = ConfigLoader(SqlConfigSource.from_settings(settings.database), timeout=settings.load_timeout)
        snapshot_file = SnapshotFile(settings.cache_file) if settings.cache_file is not None else None
        return cls(
            loader,
            ttl=timedelta(seconds=settings.cache_ttl),
            clock=clock,
            resolver=TimezoneResolver(cutoff_hour=settings.cutoff_hour, clock=clock),
            snapshot_file=snapshot_file,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> StoreConfigService:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._loader.close()

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def resolver(self) -> TimezoneResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _warm_start(self) -> bool:
        """Seed an empty cache from the snapshot file, once per process."""
        if self._warm_start_attempted or self._snapshot_file is None:
            return False
        self._warm_start_attempted = True
        snapshot = await asyncio.to_thread(self._snapshot_file.load)
        if snapshot is None or not self._cache.install(snapshot):
            return False
        _logger.debug(
            "Warm-started store cache with %d stores from %s (fetched %s)",
            len(snapshot),
            self._snapshot_file.path,
            snapshot.fetched_at.isoformat(),
        )
        return True

    async def _ensure_fresh(self) -> None:
        # A warm-started snapshot is only a fallback, so the source is asked
        # right away regardless of the file's age.
        force = False
        if self._cache.snapshot is None:
            force = await self._warm_start()
        if not force and not self._cache.is_stale():
            return
        try:
            await self._cache.refresh(force=force)
        except StoreConfigError:
            _logger.debug("Serving cached store configuration after failed refresh", exc_info=True)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get(self, token: str) -> StoreConfig | None:
        """Store for *token*, or ``None`` when unknown or never loaded."""
        await self._ensure_fresh()
        store = self._cache.get(token)
        if store is None:
            _logger.debug("No active store for token %s", mask_token(token))
        return store

    async def list_active(self) -> list[StoreConfig]:
        """All active stores ordered by name."""
        await self._ensure_fresh()
        return self._cache.list_active()

    async def list_by_state(self, state: str) -> list[StoreConfig]:
        await self._ensure_fresh()
        return self._cache.list_by_state(state)

    async def business_timestamps(self, token: str, instant: datetime | None = None) -> BusinessTimestamps | None:
        """Business date, local modified time and offset for *token*.

        Raises
        ------
        InvalidZoneError
            If the store's timezone is not recognized.
        """
        store = await self.get(token)
        if store is None:
            return None
        return self._resolver.business_timestamps(store.timezone, instant)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def health(self) -> HealthReport:
        return self._cache.health()

    async def refresh_cache(self) -> HealthReport:
        """Force a reload from the source and report the resulting health."""
        try:
            await self._cache.refresh(force=True)
        except StoreConfigError:
            _logger.debug("Manual store cache refresh failed", exc_info=True)
        return self._cache.health()
