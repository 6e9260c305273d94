#!/usr/bin/env python3
"""Watch the serving cell tower and device location from the console.

Starts a :class:`pycellwatch.CellWatch`, subscribes to its stores and
prints every update.

Usage
-----
On the phone, inside Termux with the Termux:API add-on installed::

    python scripts/watch_cells.py

Against a companion app exposing ``/cellinfo`` and ``/location``::

    export CELLWATCH_BACKEND=http
    export CELLWATCH_BASE_URL=http://127.0.0.1:8765
    python scripts/watch_cells.py

Options::

    --no-location        Do not poll the location service
    --json               Print each update as a JSON line
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pycellwatch import CellRecord, CellWatch, CellWatchConfig, LocationFix  # noqa: E402
from pycellwatch.exceptions import CellWatchError, PermissionDeniedError  # noqa: E402


def _format_cell(record: CellRecord) -> str:
    lines = [
        f"  Cell ID: {record.ci}",
        f"  TAC: {record.tac}",
        f"  MCC: {record.mcc or 'Unknown'}",
        f"  MNC: {record.mnc or 'Unknown'}",
    ]
    return "\n".join(lines)


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


def _render_cells(records: tuple[CellRecord, ...], *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps({"time": _now(), "cells": [r.model_dump() for r in records]}), flush=True)
        return
    print(f"\nCell Info ({_now()})")
    for record in records:
        print(_format_cell(record))
    sys.stdout.flush()


def _render_location(fixes: tuple[LocationFix, ...], *, json_mode: bool) -> None:
    for fix in fixes:
        if json_mode:
            print(json.dumps({"time": _now(), "location": fix.model_dump(exclude={"raw"})}), flush=True)
        else:
            print(f"  lat: {fix.latitude} long: {fix.longitude} (±{fix.accuracy} m)", flush=True)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Print cell-tower and location updates as they arrive.")
    parser.add_argument("--no-location", action="store_true", help="Do not poll the location service")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print JSON lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {"location_enabled": False} if args.no_location else {}
    try:
        config = CellWatchConfig.from_env(**overrides)
    except CellWatchError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    async with CellWatch(config) as watch:
        watch.cell_store.subscribe(lambda records: _render_cells(records, json_mode=args.json_mode))
        watch.location_store.subscribe(lambda fixes: _render_location(fixes, json_mode=args.json_mode))
        try:
            await watch.run_forever()
        except PermissionDeniedError as exc:
            print(f"{exc} Missing: {', '.join(sorted(exc.missing))}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
