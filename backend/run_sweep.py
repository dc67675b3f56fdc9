#!/usr/bin/env python3
"""
run_sweep.py

Runs one abuse sweep from the command line and prints its log.

Usage:
    # One sweep, log to stdout (exit status 1 if the sweep itself failed):
    python run_sweep.py

    # Serve the dashboard + API on the configured port instead:
    python run_sweep.py --serve

Configuration comes from SWEEP_CONFIG_FILE or the environment
(CONTROL_PLANE_URL, CONTROL_PLANE_KEY, NODE_AGENT_URL, NODE_AGENT_KEY).
"""

import sys

from sweeper import create_app
from sweeper.config import SweepConfig
from sweeper.sweep import ScanOrchestrator


def sweep_once() -> int:
    config = SweepConfig.load()
    orchestrator = ScanOrchestrator.from_config(config)
    result = orchestrator.run_scan()

    for entry in result.logs:
        print(entry)

    print(f"\n{'=' * 60}")
    print(f"Instances scanned: {result.instances_scanned}")
    print(f"Suspensions:       {result.suspensions}")
    print(f"Duration:          {result.duration_seconds}s")

    if not result.success:
        print(f"\nSWEEP FAILED: {result.error}")
        return 1
    return 0


def serve() -> None:
    app = create_app()
    port = app.config["SWEEP"].port
    print(f"Server is running on http://localhost:{port}")
    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    else:
        sys.exit(sweep_once())
