from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest
from aiohttp.test_utils import TestClient, TestServer

from storeconfig.admin import create_app
from storeconfig.exceptions import SourceUnavailableError
from storeconfig.loader import ConfigLoader
from storeconfig.service import StoreConfigService

TOKEN = "RPNrrDYtnke+OHNLfy74/A=="
NOW = datetime(2026, 1, 15, 17, 30, tzinfo=UTC)


class _FakeSource:
    name = "memory"

    def __init__(self) -> None:
        self.rows: list[Mapping[str, Any]] = [
            {"id": "1001", "token": TOKEN, "name": "Downtown", "timezone": "America/Denver", "state": "CO"},
            {"id": "1002", "token": "tok-austin", "name": "Austin", "timezone": "America/Chicago", "state": "TX"},
            {"id": "1003", "token": "tok-typo", "name": "Typo", "timezone": "America/Denvr", "state": "CO"},
        ]
        self.fail = False
        self.closed = False

    async def fetch_rows(self) -> list[Mapping[str, Any]]:
        if self.fail:
            raise SourceUnavailableError("database offline", source=self.name)
        return [dict(row) for row in self.rows]

    async def close(self) -> None:
        self.closed = True


def _client(source: _FakeSource) -> TestClient:
    service = StoreConfigService(ConfigLoader(source), clock=lambda: NOW)
    return TestClient(TestServer(create_app(service)))


@pytest.mark.asyncio
async def test_health_is_unavailable_before_first_load() -> None:
    async with _client(_FakeSource()) as client:
        resp = await client.get("/health")
        body = await resp.json()

    assert resp.status == 503
    assert body["service"] == "StoreConfigService"
    assert body["cache"]["status"] == "unavailable"


@pytest.mark.asyncio
async def test_list_and_health_after_load() -> None:
    async with _client(_FakeSource()) as client:
        resp = await client.get("/stores")
        body = await resp.json()
        assert resp.status == 200
        assert body["filter"] == "all"
        assert body["count"] == 3
        assert [store["name"] for store in body["stores"]] == ["Austin", "Downtown", "Typo"]
        assert "locationToken" in body["stores"][0]

        resp = await client.get("/stores", params={"state": "tx"})
        body = await resp.json()
        assert body["filter"] == {"state": "tx"}
        assert [store["id"] for store in body["stores"]] == ["1002"]

        resp = await client.get("/health")
        health = (await resp.json())["cache"]
        assert resp.status == 200
        assert health["status"] == "healthy"
        assert health["totalEntities"] == 3


@pytest.mark.asyncio
async def test_get_store_with_percent_encoded_token() -> None:
    async with _client(_FakeSource()) as client:
        resp = await client.get("/store?token=RPNrrDYtnke%2BOHNLfy74%2FA%3D%3D")
        body = await resp.json()

    assert resp.status == 200
    assert body["store"]["name"] == "Downtown"
    assert body["store"]["locationToken"] == TOKEN


@pytest.mark.asyncio
async def test_get_store_errors() -> None:
    async with _client(_FakeSource()) as client:
        missing = await client.get("/store")
        assert missing.status == 400

        unknown = await client.get("/store", params={"token": "not-a-real-token"})
        body = await unknown.json()
        assert unknown.status == 404
        assert body["token"] == "not-a-real..."


@pytest.mark.asyncio
async def test_business_date_endpoint() -> None:
    async with _client(_FakeSource()) as client:
        resp = await client.get("/business-date", params={"token": "tok-austin", "at": "2026-01-15T10:59:00Z"})
        body = await resp.json()
        assert resp.status == 200
        # 04:59 CST
        assert body == {"businessDate": "2026-01-14", "modifiedTimeLocal": "2026-01-15T04:59:00", "offsetMinutes": -360}

        resp = await client.get("/business-date", params={"token": "tok-austin"})
        body = await resp.json()
        assert body["businessDate"] == "2026-01-15"
        assert body["modifiedTimeLocal"] == "2026-01-15T11:30:00"


@pytest.mark.asyncio
async def test_business_date_errors() -> None:
    async with _client(_FakeSource()) as client:
        assert (await client.get("/business-date")).status == 400
        bad_at = await client.get("/business-date", params={"token": "tok-austin", "at": "yesterday"})
        assert bad_at.status == 400
        unknown = await client.get("/business-date", params={"token": "nope"})
        assert unknown.status == 404

        typo = await client.get("/business-date", params={"token": "tok-typo"})
        body = await typo.json()
        assert typo.status == 422
        assert body["zone"] == "America/Denvr"


@pytest.mark.asyncio
async def test_refresh_reports_outcome() -> None:
    source = _FakeSource()
    async with _client(source) as client:
        ok = await client.post("/refresh")
        body = await ok.json()
        assert ok.status == 200
        assert body["success"] is True
        assert body["cache"]["totalEntities"] == 3
        assert isinstance(body["durationMs"], int)

        source.fail = True
        failed = await client.post("/refresh")
        body = await failed.json()
        assert failed.status == 503
        assert body["success"] is False
        assert body["cache"]["lastError"] == "database offline"
        # Last good snapshot is still served.
        assert body["cache"]["totalEntities"] == 3


@pytest.mark.asyncio
async def test_shutdown_closes_service() -> None:
    source = _FakeSource()
    async with _client(source) as client:
        await client.get("/health")

    assert source.closed
