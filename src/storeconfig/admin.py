"""Admin HTTP surface for the store cache.

Routes::

    GET  /health                      cache health (503 when unavailable)
    POST /refresh                     force a reload from the source
    GET  /stores[?state=CO]           active stores, optionally by state
    GET  /store?token=...             one store (404 when unknown)
    GET  /business-date?token=...     business date / modified time / offset

Location tokens travel in the query string and must be percent-encoded
(``+`` as ``%2B``). They are masked in every log line and error payload.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any

from aiohttp import web

from storeconfig._redact import mask_token
from storeconfig.exceptions import InvalidZoneError
from storeconfig.models._base import StoreBaseModel, parse_timestamp
from storeconfig.models.health import HealthStatus
from storeconfig.service import StoreConfigService

_logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("storeconfig_service", StoreConfigService)


def _dump(model: StoreBaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _error(status: int, message: str, **extra: Any) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status)


def _require_token(request: web.Request) -> str | None:
    token = request.query.get("token", "")
    return token if token.strip() else None


async def _health(request: web.Request) -> web.Response:
    health = request.app[SERVICE_KEY].health()
    status = 503 if health.status == HealthStatus.UNAVAILABLE else 200
    return web.json_response({"service": "StoreConfigService", "cache": _dump(health)}, status=status)


async def _refresh(request: web.Request) -> web.Response:
    _logger.info("Manual store cache refresh requested")
    started = time.monotonic()
    health = await request.app[SERVICE_KEY].refresh_cache()
    success = health.last_error is None
    return web.json_response(
        {
            "action": "refresh",
            "success": success,
            "durationMs": round((time.monotonic() - started) * 1000),
            "cache": _dump(health),
        },
        status=200 if success else 503,
    )


async def _list_stores(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    state = request.query.get("state", "").strip()
    stores = await service.list_by_state(state) if state else await service.list_active()
    return web.json_response(
        {
            "filter": {"state": state} if state else "all",
            "count": len(stores),
            "stores": [_dump(store) for store in stores],
        }
    )


async def _get_store(request: web.Request) -> web.Response:
    token = _require_token(request)
    if token is None:
        return _error(400, "Missing token parameter", usage="/store?token=<percent-encoded token>")
    store = await request.app[SERVICE_KEY].get(token)
    if store is None:
        return _error(404, "Store not found", token=mask_token(token))
    return web.json_response({"store": _dump(store)})


async def _business_date(request: web.Request) -> web.Response:
    token = _require_token(request)
    if token is None:
        return _error(400, "Missing token parameter", usage="/business-date?token=<percent-encoded token>[&at=ISO-8601]")

    instant: datetime | None = None
    at = request.query.get("at")
    if at:
        try:
            instant = parse_timestamp(at)
        except ValueError:
            return _error(400, "Invalid 'at' timestamp", at=at)

    service = request.app[SERVICE_KEY]
    try:
        timestamps = await service.business_timestamps(token, instant)
    except InvalidZoneError as exc:
        _logger.warning("Store %s has an invalid timezone %r", mask_token(token), exc.zone)
        return _error(422, "Store timezone is not recognized", zone=exc.zone)
    if timestamps is None:
        return _error(404, "Store not found", token=mask_token(token))
    return web.json_response(_dump(timestamps))


def create_app(service: StoreConfigService) -> web.Application:
    """Build the admin application around *service*.

    The service is closed when the application shuts down.
    """
    app = web.Application()
    app[SERVICE_KEY] = service
    app.router.add_get("/health", _health)
    app.router.add_post("/refresh", _refresh)
    app.router.add_get("/stores", _list_stores)
    app.router.add_get("/store", _get_store)
    app.router.add_get("/business-date", _business_date)

    async def _close_service(_app: web.Application) -> None:
        await service.close()

    app.on_cleanup.append(_close_service)
    return app
