"""One-shot load of every active store from the configuration source."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from storeconfig._constants import DEFAULT_LOAD_TIMEOUT
from storeconfig._redact import redact_for_log
from storeconfig.exceptions import MalformedRecordError, SourceUnavailableError, StoreConfigError
from storeconfig.models.snapshot import index_by_token
from storeconfig.models.store import StoreConfig

_logger = logging.getLogger(__name__)


class ConfigSource(Protocol):
    """Structural interface for the source of truth.

    ``fetch_rows`` returns one mapping per location using the column
    aliases of the SQL query (``id``, ``token``, ``name``, ``timezone``,
    ``daily_hours`` as JSON text, ...). Implementations raise
    :class:`SourceUnavailableError` on connectivity or auth failures.
    """

    async def fetch_rows(self) -> list[Mapping[str, Any]]:
        ...

    async def close(self) -> None:
        ...


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "record"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _decode_daily_hours(raw: Any, record_id: str) -> Any:
    if not isinstance(raw, (str, bytes, bytearray)):
        return raw
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise MalformedRecordError(
            f"Store {record_id}: daily_hours is not valid JSON ({exc})",
            record_id=record_id,
            reason="daily_hours",
        ) from exc


def parse_store_row(row: Mapping[str, Any]) -> StoreConfig:
    """Map one source row to a :class:`StoreConfig`.

    Raises
    ------
    MalformedRecordError
        If ``daily_hours`` is unparseable or a required field is null or
        invalid.
    """
    data = dict(row)
    record_id = str(data.get("id") or data.get("name") or "<unknown>")

    token = data.pop("token", None) or data.pop("locationToken", None) or data.get("location_token")
    if token is not None:
        data["location_token"] = token
    # Rows without a vendor id are keyed by their token.
    if data.get("id") in (None, "") and token:
        data["id"] = token
    raw_hours = data.pop("dailyHours", None)
    if raw_hours is None:
        raw_hours = data.get("daily_hours")
    data["daily_hours"] = _decode_daily_hours(raw_hours, record_id)

    try:
        return StoreConfig.model_validate(data)
    except ValidationError as exc:
        reason = _describe_validation_error(exc)
        raise MalformedRecordError(
            f"Store {record_id}: {reason}",
            record_id=record_id,
            reason=reason,
        ) from exc


class ConfigLoader:
    """Read and validate all active stores.

    A load is side-effect free apart from logging. Individual bad rows are
    skipped (see :attr:`last_skipped`); duplicate tokens reject the whole
    load.
    """

    def __init__(self, source: ConfigSource, *, timeout: float = DEFAULT_LOAD_TIMEOUT) -> None:
        self._source = source
        self._timeout = timeout
        self._last_skipped: tuple[MalformedRecordError, ...] = ()

    @property
    def source_name(self) -> str:
        return str(getattr(self._source, "name", type(self._source).__name__))

    @property
    def last_skipped(self) -> tuple[MalformedRecordError, ...]:
        """Rows dropped by the most recent load that reached the source."""
        return self._last_skipped

    async def load_all(self) -> list[StoreConfig]:
        """Fetch and validate every active store.

        Raises
        ------
        SourceUnavailableError
            If the source fails or does not answer within the timeout.
        DuplicateTokenError
            If two active rows share a location token.
        """
        try:
            async with asyncio.timeout(self._timeout if self._timeout > 0 else None):
                rows = await self._source.fetch_rows()
        except TimeoutError as exc:
            raise SourceUnavailableError(
                f"Loading store configuration from {self.source_name} timed out after {self._timeout:g}s",
                source=self.source_name,
            ) from exc
        except StoreConfigError:
            raise
        except Exception as exc:
            raise SourceUnavailableError(
                f"Store configuration source {self.source_name} failed: {exc}",
                source=self.source_name,
            ) from exc

        stores: list[StoreConfig] = []
        skipped: list[MalformedRecordError] = []
        for row in rows:
            try:
                store = parse_store_row(row)
            except MalformedRecordError as exc:
                _logger.warning("Skipping malformed store record %s: %s", exc.record_id, exc.reason)
                _logger.debug("Malformed store row: %s", redact_for_log(row))
                skipped.append(exc)
                continue
            if not store.is_active:
                continue
            stores.append(store)

        self._last_skipped = tuple(skipped)
        index_by_token(stores)
        _logger.debug("Loaded %d stores from %s (%d skipped)", len(stores), self.source_name, len(skipped))
        return stores

    async def close(self) -> None:
        await self._source.close()
