#!/usr/bin/env python3
"""Run one Everywhere Hub invocation from the command line.

Loads the ephemeral store from a JSON file, runs either a scheduled tick
or a webhook replay, saves the store back, and prints the emitted
feature collection.

Usage
-----
Scheduled tick (pulls when ``EVERYWHERE_TOKEN_ID`` is set and the cache
is stale)::

    export EVERYWHERE_TOKEN_ID="..."
    python scripts/run_tick.py --state state.json

Replay a captured webhook body::

    python scripts/run_tick.py --state state.json --webhook body.json

Options::

    --state FILE         Ephemeral store file (default: ./everywhere-state.json)
    --webhook FILE       Replay FILE as a webhook body instead of ticking
    --now MS             Override the current time (epoch milliseconds)
    --output FILE        Write output to FILE instead of stdout
    --show-state         Also print the persisted store after the run
    --verbose            Enable debug logging
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

from pyeverywhere import EverywhereConfig, EverywhereError, EverywhereTask, JsonFileStateBackend  # noqa: E402


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    config = EverywhereConfig.from_env(**({"debug": True} if args.verbose else {}))
    backend = JsonFileStateBackend(args.state)

    async with EverywhereTask(config, backend) as task:
        if args.webhook:
            body = Path(args.webhook).read_text(encoding="utf-8")
            collection = await task.handle_webhook(body)
            report: dict[str, Any] = {"path": "webhook", "collection": collection.to_geojson()}
        else:
            result = await task.run_scheduled(now_ms=args.now)
            report = {
                "path": "scheduled",
                "gate": str(result.gate) if result.gate is not None else None,
                "pulled": result.pulled,
                "pull_error": result.pull_error,
                "evicted": list(result.evicted),
                "collection": result.collection.to_geojson(),
            }

    if args.show_state:
        report["state"] = await backend.load()
    return report


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one Everywhere Hub webhook or scheduled invocation")
    parser.add_argument("--state", default="everywhere-state.json", help="Ephemeral store JSON file")
    parser.add_argument("--webhook", help="Replay this JSON file as a webhook body")
    parser.add_argument("--now", type=int, help="Current time override (epoch milliseconds)")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--show-state", action="store_true", help="Print the persisted store after the run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        report = asyncio.run(_run(args))
    except EverywhereError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    text = json.dumps(report, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


if __name__ == "__main__":
    main()
