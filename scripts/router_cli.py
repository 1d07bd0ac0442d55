#!/usr/bin/env python3
"""Inspect and drive a Magnum router from the command line.

Connects, runs the bulk sync, waits for the inbound stream to go quiet and
then either prints the cached state or issues one command.

Usage
-----
Set environment variables and run::

    export MAGNUM_HOST="10.0.0.5"
    export MAGNUM_PORT=23
    export MAGNUM_SOURCE_COUNT=64
    export MAGNUM_DESTINATION_COUNT=32
    python scripts/router_cli.py status

Commands::

    status [--json]                  Print names, locks and routes
    route DEST SRC [--level N ...]   Route SRC to DEST (default: all levels)
    lock DEST / unlock DEST          Lock or unlock a destination
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymagnum import MagnumConfig, MagnumError, MagnumRouter, index_to_level  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _status_text(router: MagnumRouter) -> str:
    snapshot = router.snapshot()
    lines = [_section("Sources")]
    for source in range(1, snapshot.source_count + 1):
        lines.append(f"  {source:>4}  {snapshot.source_names[source]}")

    lines.append(_section("Destinations"))
    codes = "".join(index_to_level(level) for level in range(snapshot.level_count))
    lines.append(f"  {'dst':>4}  {'name':<16} lock  {codes}")
    for destination in range(1, snapshot.destination_count + 1):
        lock = "L" if snapshot.destination_locks[destination] else "-"
        routes = " ".join(str(source) for source in snapshot.routes[destination])
        lines.append(f"  {destination:>4}  {snapshot.destination_names[destination]:<16} {lock:<4}  {routes}")
    return "\n".join(lines)


def _status_json(router: MagnumRouter) -> dict[str, Any]:
    data = router.snapshot().model_dump()
    data["levels"] = [index_to_level(level) for level in range(router.config.level_count)]
    return data


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Magnum router Quartz client")
    parser.add_argument("--host", help="Router address (default: MAGNUM_HOST)")
    parser.add_argument("--port", type=int, help="Quartz port (default: MAGNUM_PORT)")
    parser.add_argument("--levels", type=int, dest="level_count", help="Level count (default: MAGNUM_LEVEL_COUNT or 17)")
    parser.add_argument("--sync-timeout", type=float, default=30.0, help="Seconds to wait for the bulk sync")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    status = commands.add_parser("status", help="Print the cached router state")
    status.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")

    route = commands.add_parser("route", help="Route a source to a destination")
    route.add_argument("destination", type=int)
    route.add_argument("source", type=int)
    route.add_argument("--level", type=int, action="append", dest="route_levels", help="Level index (repeatable)")

    lock = commands.add_parser("lock", help="Lock a destination")
    lock.add_argument("destination", type=int)

    unlock = commands.add_parser("unlock", help="Unlock a destination")
    unlock.add_argument("destination", type=int)
    return parser


async def run(args: argparse.Namespace) -> int:
    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("level_count", args.level_count))
        if value is not None
    }
    config = MagnumConfig.from_env(**overrides)

    async with MagnumRouter.from_config(config) as router:
        if not await router.wait_for_sync(timeout=args.sync_timeout):
            print("Warning: bulk sync did not settle, state may be incomplete", file=sys.stderr)
        if router.protocol_error_count:
            print(f"Warning: router reported {router.protocol_error_count} errors", file=sys.stderr)

        if args.command == "status":
            if args.json_mode:
                print(json.dumps(_status_json(router), indent=2))
            else:
                print(_status_text(router))
        elif args.command == "route":
            levels = args.route_levels or range(config.level_count)
            await router.set_route(levels, args.destination, args.source)
            print(f"Requested route {args.source} -> {args.destination}")
        elif args.command in ("lock", "unlock"):
            await router.set_lock(args.destination, args.command == "lock")
            print(f"Requested {args.command} of destination {args.destination}")
    return 0


def main() -> None:
    args = _build_parser().parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        sys.exit(asyncio.run(run(args)))
    except (MagnumError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
