#!/usr/bin/env python3
"""Headless JSON runner for the intersection simulation.

Usage:
    python3 -m carrefour.bridge input.json output.json

Input:  {"config": {...SimulationConfig options...}, "durationMs": 5000}
Output: {"snapshot": {...}, "errors": [...]}

Without ``durationMs`` the run lasts until every vehicle has crossed.
"""

import json
import logging
import sys

from .config import load_config
from .errors import InvalidArgument
from .simulator import start_simulation


def run(input_path, output_path):
    with open(input_path) as f:
        data = json.load(f)

    config = load_config(data.get("config", {}))
    duration_ms = data.get("durationMs")
    timeout = None if duration_ms is None else duration_ms / 1000.0

    simulation = start_simulation(config)
    try:
        simulation.wait_until_finished(timeout)
    finally:
        simulation.shutdown()

    result = {
        "snapshot": simulation.snapshot().model_dump(mode="json"),
        "errors": list(simulation.errors),
    }
    with open(output_path, "w") as f:
        json.dump(result, f, indent=2)
        f.write("\n")
    return result


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 2:
        print("Usage: python3 -m carrefour.bridge input.json output.json", file=sys.stderr)
        return 1
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(threadName)s %(levelname)s %(message)s")
    try:
        run(argv[0], argv[1])
    except (OSError, json.JSONDecodeError, InvalidArgument) as exc:
        print(f"Simulator error:\n{exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
