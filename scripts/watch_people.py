#!/usr/bin/env python3
"""Print the cached people-in-space roster as it changes.

Opens the local cache, starts background syncing and prints every
roster snapshot until interrupted.

Usage
-----
::

    python scripts/watch_people.py
    python scripts/watch_people.py --interval 60 --backoff
    python scripts/watch_people.py --once --position

Environment variables ``PEOPLEINSPACE_*`` are honoured; flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from peopleinspace import (  # noqa: E402
    Assignment,
    PeopleInSpaceClient,
    PeopleInSpaceConfig,
    PeopleInSpaceError,
)


def _format_roster(people: list[Assignment]) -> str:
    if not people:
        return "  (no cached roster)"
    width = max(len(p.name) for p in people)
    return "\n".join(f"  {p.name.ljust(width)}  {p.craft}" for p in people)


async def _print_position(client: PeopleInSpaceClient) -> None:
    try:
        position = await client.fetch_iss_position()
    except PeopleInSpaceError as exc:
        print(f"!! ISS position unavailable: {exc}")
        return
    when = position.timestamp.isoformat() if position.timestamp else "unknown time"
    print(f"ISS at lat={position.latitude:.4f} lon={position.longitude:.4f} ({when})")


async def run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.database:
        overrides["database_path"] = args.database
    if args.interval is not None:
        overrides["sync_interval"] = args.interval
    if args.backoff:
        overrides["backoff_on_failure"] = True
    config = PeopleInSpaceConfig.from_env(**overrides)

    async with PeopleInSpaceClient(config) as client:
        if args.position:
            await _print_position(client)

        if args.once:
            try:
                cycle = await client.refresh()
            except PeopleInSpaceError as exc:
                print(f"!! sync failed: {exc}")
                print(_format_roster(await client.cached_people()))
                return 1
            print(f"Synced {cycle.roster_size} people in {cycle.duration:.2f}s")
            print(_format_roster(await client.cached_people()))
            return 0

        client.start()
        async with client.people() as snapshots:
            async for people in snapshots:
                print(f"── {len(people)} people in space ──")
                print(_format_roster(people))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch the cached people-in-space roster.")
    parser.add_argument("--database", help="SQLite cache path (default: peopleinspace.db)")
    parser.add_argument("--interval", type=float, help="Seconds between background syncs")
    parser.add_argument("--backoff", action="store_true", help="Back off after failed syncs")
    parser.add_argument("--once", action="store_true", help="Sync once, print and exit")
    parser.add_argument("--position", action="store_true", help="Also print the current ISS position")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
