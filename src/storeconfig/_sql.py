"""Relational configuration source backed by SQLAlchemy's async engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from storeconfig.config import DatabaseSettings
from storeconfig.exceptions import SourceUnavailableError, StoreConfigSettingsError

_logger = logging.getLogger(__name__)

# Column aliases match the keys parse_store_row expects.
STORE_QUERY = text(
    """
    SELECT
        par_brink_location_id AS id,
        location_token AS token,
        store_name AS name,
        timezone,
        state,
        region,
        address,
        phone,
        storeurl AS store_url,
        google_maps_url,
        daily_hours,
        manager_name AS manager,
        opening_hour,
        closing_hour,
        is_active,
        last_updated
    FROM store_configurations
    WHERE is_active = 1
    ORDER BY store_name
    """
)


def build_database_url(settings: DatabaseSettings) -> URL | str:
    """Return the SQLAlchemy URL for *settings*.

    An explicit ``url`` is used verbatim. Otherwise an Azure SQL
    ``mssql+aioodbc`` URL is assembled; without a user name the managed
    identity of the host authenticates.
    """
    if settings.url:
        return settings.url
    if not settings.is_configured:
        raise StoreConfigSettingsError(
            "No database configured: set STORECONFIG_DATABASE_URL or DB_SERVER and DB_NAME"
        )
    query: dict[str, str] = {
        "driver": settings.driver,
        "Encrypt": "yes",
        "TrustServerCertificate": "no",
    }
    if not settings.user:
        query["Authentication"] = "ActiveDirectoryMsi"
    return URL.create(
        "mssql+aioodbc",
        username=settings.user,
        password=settings.password,
        host=settings.server,
        database=settings.database,
        query=query,
    )


class SqlConfigSource:
    """Reads active rows from ``store_configurations``."""

    name = "sql"

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> SqlConfigSource:
        engine = create_async_engine(build_database_url(settings), pool_pre_ping=True)
        return cls(engine)

    async def fetch_rows(self) -> list[Mapping[str, Any]]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(STORE_QUERY)
                rows = [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, OSError) as exc:
            raise SourceUnavailableError(
                f"Store configuration query failed: {exc}",
                source=self.name,
            ) from exc
        _logger.debug("Fetched %d store rows", len(rows))
        return rows

    async def close(self) -> None:
        await self._engine.dispose()
