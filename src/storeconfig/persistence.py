"""On-disk snapshot artifact used to warm-start the cache.

The file is never authoritative: it only seeds the in-memory cache until
the configuration source answers.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from storeconfig.exceptions import DuplicateTokenError
from storeconfig.models._base import StoreBaseModel
from storeconfig.models.snapshot import CacheSnapshot
from storeconfig.models.store import StoreConfig

_logger = logging.getLogger(__name__)


class SnapshotDocument(StoreBaseModel):
    """Wire shape: ``{"fetchedAt": ISO-8601, "entities": [StoreConfig...]}``."""

    fetched_at: datetime
    entities: list[StoreConfig]


class SnapshotFile:
    """Reads and atomically writes the snapshot artifact at *path*."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: CacheSnapshot) -> None:
        """Write *snapshot* to a temporary file, then rename it into place."""
        document = SnapshotDocument(fetched_at=snapshot.fetched_at, entities=list(snapshot.entities))
        payload = document.model_dump_json(by_alias=True, indent=2)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
        _logger.debug("Snapshot with %d stores written to %s", len(snapshot), self._path)

    def load(self) -> CacheSnapshot | None:
        """Return the stored snapshot, or ``None`` if missing or unusable."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("Could not read snapshot file %s", self._path, exc_info=True)
            return None

        try:
            document = SnapshotDocument.model_validate_json(text)
            return CacheSnapshot.build(document.entities, document.fetched_at)
        except (ValidationError, DuplicateTokenError) as exc:
            _logger.warning("Ignoring invalid snapshot file %s: %s", self._path, exc)
            return None
