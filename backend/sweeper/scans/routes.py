# sweeper/scans/routes.py
"""
Scan API Routes

  GET  /scan          — run one sweep synchronously, return its full log
  POST /scan/start    — start a sweep on a background thread (202)
  GET  /logs          — current log snapshot
  GET  /logs/stream   — live log as Server-Sent Events ("event: reset" per new scan)
  GET  /              — landing page (start button + live terminal)
"""

from __future__ import annotations

import json
import logging
from threading import Thread

from flask import Blueprint, Response, jsonify, stream_with_context

from sweeper.extensions import get_orchestrator
from sweeper.sweep.base import LogReset
from sweeper.sweep.errors import ScanInProgress

logger = logging.getLogger(__name__)

scans_bp = Blueprint("scans", __name__)

# Idle time before the event stream sends a keepalive comment
KEEPALIVE_SECONDS = 15


def _serialize_logs(entries) -> list:
    return [e.to_dict() for e in entries]


@scans_bp.get("/scan")
def run_scan():
    orchestrator = get_orchestrator()
    try:
        result = orchestrator.run_scan()
    except ScanInProgress as e:
        return jsonify(
            error="Conflict",
            message=str(e),
            logs=_serialize_logs(orchestrator.snapshot()),
        ), 409

    if not result.success:
        return jsonify(
            message="Error in scan process",
            error=result.error,
            logs=_serialize_logs(result.logs),
        ), 500

    return jsonify(
        message="Scan completed successfully",
        instancesScanned=result.instances_scanned,
        suspensions=result.suspensions,
        durationSeconds=result.duration_seconds,
        logs=_serialize_logs(result.logs),
    ), 200


@scans_bp.post("/scan/start")
def start_scan():
    orchestrator = get_orchestrator()
    if orchestrator.is_running:
        return jsonify(error="Conflict", message=str(ScanInProgress())), 409

    def _run():
        try:
            orchestrator.run_scan()
        except ScanInProgress:
            logger.info("Background sweep skipped: another sweep started first")
        except Exception as e:
            logger.error("Background sweep crashed: %s", e, exc_info=True)

    Thread(target=_run, daemon=True, name="sweep").start()
    return jsonify(status="started"), 202


@scans_bp.get("/logs")
def get_logs():
    orchestrator = get_orchestrator()
    return jsonify(
        logs=_serialize_logs(orchestrator.snapshot()),
        running=orchestrator.is_running,
    ), 200


@scans_bp.get("/logs/stream")
def stream_logs():
    orchestrator = get_orchestrator()

    def _events():
        with orchestrator.subscribe(replay=True) as sub:
            while True:
                entry = sub.get(timeout=KEEPALIVE_SECONDS)
                if entry is None:
                    yield ": keepalive\n\n"
                    continue
                if isinstance(entry, LogReset):
                    # a new scan started; clients clear their view
                    yield f"event: reset\ndata: {json.dumps(entry.to_dict())}\n\n"
                    continue
                yield f"data: {json.dumps(entry.to_dict())}\n\n"

    return Response(
        stream_with_context(_events()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@scans_bp.get("/")
def landing_page():
    return Response(LANDING_PAGE, mimetype="text/html")


LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Abuse Sweep</title>
    <script src="https://cdn.jsdelivr.net/npm/xterm@4.12.0/lib/xterm.js"></script>
    <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/xterm@4.12.0/css/xterm.css" />
</head>
<body style="background:#111;color:#c5c9d1;font-family:Menlo,monospace">
    <button id="startScan">Start Scan</button>
    <div id="terminal" style="margin-top:12px"></div>
    <script>
        const terminal = new Terminal({
            disableStdin: true,
            cursorStyle: 'underline',
            rows: 30,
            cols: 120,
            fontFamily: 'Menlo, monospace',
            fontSize: 12,
        });
        terminal.open(document.getElementById('terminal'));

        document.getElementById('startScan').addEventListener('click', async () => {
            terminal.clear();
            const res = await fetch('/scan/start', { method: 'POST' });
            if (res.status === 409) {
                terminal.writeln('A scan is already in progress.');
            }
        });

        const source = new EventSource('/logs/stream');
        source.addEventListener('reset', () => terminal.clear());
        source.onmessage = (event) => {
            const log = JSON.parse(event.data);
            terminal.writeln(`[${log.timestamp}] ${log.message}`);
        };
    </script>
</body>
</html>
"""
