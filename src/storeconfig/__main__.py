"""Command-line entry point.

Examples::

    python -m storeconfig serve
    python -m storeconfig stores --state CO
    python -m storeconfig store --token 'RPNrrDYtnke+OHNLfy74/A=='
    python -m storeconfig business-date --zone America/Denver --at 2026-01-15T10:30:00Z
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from aiohttp import web

from storeconfig.admin import create_app
from storeconfig.config import StoreConfigSettings
from storeconfig.exceptions import StoreConfigError
from storeconfig.models._base import parse_timestamp
from storeconfig.service import StoreConfigService
from storeconfig.timezone import TimezoneResolver


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="storeconfig", description="Store configuration cache tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the admin HTTP surface")
    serve.add_argument("--host", default=None, help="Bind address (default: STORECONFIG_ADMIN_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: STORECONFIG_ADMIN_PORT)")

    stores = sub.add_parser("stores", help="List active stores")
    stores.add_argument("--state", default=None, help="Only stores in this state")

    store = sub.add_parser("store", help="Show one store")
    store.add_argument("--token", required=True, help="Location token")

    sub.add_parser("health", help="Load once and print cache health")

    business = sub.add_parser("business-date", help="Business date and offset for a zone")
    business.add_argument("--zone", required=True, help="IANA timezone, e.g. America/Denver")
    business.add_argument("--at", default=None, help="ISO-8601 instant (default: now)")
    business.add_argument("--cutoff-hour", type=int, default=None, help="Override the business-day cutoff")

    return parser.parse_args(argv)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


async def _run_query(args: argparse.Namespace, settings: StoreConfigSettings) -> int:
    async with StoreConfigService.from_settings(settings) as service:
        if args.command == "stores":
            found = await service.list_by_state(args.state) if args.state else await service.list_active()
            _print_json([store.model_dump(mode="json", by_alias=True) for store in found])
        elif args.command == "store":
            store = await service.get(args.token)
            if store is None:
                print("Store not found", file=sys.stderr)
                return 1
            _print_json(store.model_dump(mode="json", by_alias=True))
        else:
            await service.refresh_cache()
        health = service.health()
        if args.command == "health":
            _print_json(health.model_dump(mode="json", by_alias=True))
        return 0 if health.last_error is None else 2


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = StoreConfigSettings.from_env()
        if args.command == "business-date":
            cutoff = args.cutoff_hour if args.cutoff_hour is not None else settings.cutoff_hour
            resolver = TimezoneResolver(cutoff_hour=cutoff)
            instant = parse_timestamp(args.at) if args.at else None
            _print_json(resolver.business_timestamps(args.zone, instant).model_dump(mode="json", by_alias=True))
            return 0

        if args.command == "serve":
            web.run_app(
                create_app(StoreConfigService.from_settings(settings)),
                host=args.host or settings.admin_host,
                port=args.port or settings.admin_port,
            )
            return 0

        return asyncio.run(_run_query(args, settings))
    except (StoreConfigError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
