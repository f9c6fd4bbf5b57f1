"""In-memory store-configuration cache with single-flight refresh.

This is the only component that owns the current snapshot and the
refresh-in-flight marker. Reads are synchronous against whatever snapshot
is current; a refresh builds the next snapshot off to the side and swaps
the reference in one assignment.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta

from storeconfig._constants import DEFAULT_CACHE_TTL
from storeconfig.clock import ClockSource, utcnow
from storeconfig.exceptions import StoreConfigError
from storeconfig.loader import ConfigLoader
from storeconfig.models.health import HealthReport, HealthStatus
from storeconfig.models.snapshot import CacheSnapshot
from storeconfig.models.store import StoreConfig
from storeconfig.persistence import SnapshotFile

_logger = logging.getLogger(__name__)


class CacheStore:
    """Current snapshot of every active store plus refresh bookkeeping.

    Parameters
    ----------
    loader : ConfigLoader
        Source of fresh snapshots.
    ttl : timedelta
        Age at which the snapshot becomes due for refresh.
    clock : ClockSource
        Supplies "now" for staleness and ``fetched_at``.
    snapshot_file : SnapshotFile or None
        Where each successful refresh is persisted for warm starts.
    """

    def __init__(
        self,
        loader: ConfigLoader,
        *,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: ClockSource = utcnow,
        snapshot_file: SnapshotFile | None = None,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._loader = loader
        self._ttl = ttl
        self._clock = clock
        self._snapshot_file = snapshot_file
        self._snapshot: CacheSnapshot | None = None
        self._refresh_task: asyncio.Task[CacheSnapshot] | None = None
        self._last_error: StoreConfigError | None = None
        self._refresh_count = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def snapshot(self) -> CacheSnapshot | None:
        return self._snapshot

    @property
    def last_refresh_error(self) -> StoreConfigError | None:
        return self._last_error

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_task is not None

    @property
    def refresh_count(self) -> int:
        """Number of successful refreshes since construction."""
        return self._refresh_count

    def is_stale(self, now: datetime | None = None) -> bool:
        snapshot = self._snapshot
        if snapshot is None:
            return True
        return snapshot.age(now if now is not None else self._clock()) >= self._ttl

    def install(self, snapshot: CacheSnapshot) -> bool:
        """Seed the cache with a snapshot read from disk.

        Ignored when a snapshot at least as recent is already present.
        """
        current = self._snapshot
        if current is not None and current.fetched_at >= snapshot.fetched_at:
            return False
        self._snapshot = snapshot
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, token: str) -> StoreConfig | None:
        snapshot = self._snapshot
        if snapshot is None:
            return None
        return snapshot.by_token.get(token)

    def list_active(self) -> list[StoreConfig]:
        snapshot = self._snapshot
        if snapshot is None:
            return []
        return list(snapshot.entities)

    def list_by_state(self, state: str) -> list[StoreConfig]:
        code = state.strip().casefold()
        return [
            store
            for store in self.list_active()
            if store.state is not None and store.state.strip().casefold() == code
        ]

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, *, force: bool = False) -> CacheSnapshot:
        """Reload from the loader if the snapshot is due (or *force*).

        Concurrent callers share one in-flight load. On failure the current
        snapshot is kept, the error is recorded in
        :attr:`last_refresh_error` and re-raised to every awaiter.

        Raises
        ------
        StoreConfigError
            The loader's failure (``SourceUnavailableError``,
            ``DuplicateTokenError``).
        """
        task = self._refresh_task
        if task is None:
            snapshot = self._snapshot
            if not force and snapshot is not None and not self.is_stale():
                return snapshot
            task = asyncio.get_running_loop().create_task(self._run_refresh(), name="storeconfig-refresh")
            task.add_done_callback(self._on_refresh_done)
            self._refresh_task = task
        return await asyncio.shield(task)

    async def _run_refresh(self) -> CacheSnapshot:
        started = time.monotonic()
        try:
            stores = await self._loader.load_all()
            snapshot = CacheSnapshot.build(stores, self._clock())
        except StoreConfigError as exc:
            self._last_error = exc
            previous = self._snapshot
            if previous is None:
                _logger.warning("Store configuration unavailable: %s", exc)
            else:
                _logger.warning(
                    "Store configuration refresh failed, keeping snapshot from %s: %s",
                    previous.fetched_at.isoformat(),
                    exc,
                )
            raise

        self._snapshot = snapshot
        self._last_error = None
        self._refresh_count += 1
        _logger.debug(
            "Store cache refreshed with %d stores in %.0f ms",
            len(snapshot),
            (time.monotonic() - started) * 1000,
        )
        await self._persist(snapshot)
        return snapshot

    def _on_refresh_done(self, task: asyncio.Task[CacheSnapshot]) -> None:
        # Runs even for a task cancelled before its first step.
        if self._refresh_task is task:
            self._refresh_task = None
        # Awaiters go through asyncio.shield; if all of them were cancelled
        # nobody else retrieves the outcome.
        if not task.cancelled():
            task.exception()

    async def _persist(self, snapshot: CacheSnapshot) -> None:
        if self._snapshot_file is None:
            return
        try:
            await asyncio.to_thread(self._snapshot_file.save, snapshot)
        except OSError:
            _logger.warning("Could not write store snapshot to %s", self._snapshot_file.path, exc_info=True)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health(self) -> HealthReport:
        snapshot = self._snapshot
        last_error = str(self._last_error) if self._last_error is not None else None
        common = {
            "last_error": last_error,
            "refresh_in_flight": self.refresh_in_flight,
            "skipped_records": len(self._loader.last_skipped),
        }
        if snapshot is None:
            return HealthReport(status=HealthStatus.UNAVAILABLE, **common)

        age = snapshot.age(self._clock())
        status = HealthStatus.HEALTHY if age <= self._ttl else HealthStatus.STALE
        return HealthReport(
            status=status,
            total_entities=len(snapshot),
            last_refresh=snapshot.fetched_at,
            age_seconds=round(max(age.total_seconds(), 0.0), 3),
            **common,
        )
