# sweeper/extensions.py
from __future__ import annotations

from flask import Flask, current_app

from sweeper.config import SweepConfig
from sweeper.sweep import ScanOrchestrator

EXTENSION_KEY = "scan_orchestrator"


def init_extensions(app: Flask, config: SweepConfig, orchestrator: ScanOrchestrator | None = None):
    # One orchestrator (and so one log sink + one in-progress guard) per app
    app.extensions[EXTENSION_KEY] = orchestrator or ScanOrchestrator.from_config(config)
    app.config["SWEEP"] = config


def get_orchestrator() -> ScanOrchestrator:
    return current_app.extensions[EXTENSION_KEY]
