# sweeper/scheduler.py
"""
Background Scheduler for Periodic Sweeps
────────────────────────────────────────
Uses APScheduler to run a full sweep every SWEEP_INTERVAL_MINUTES.
A tick that lands while a sweep is still running is skipped, never queued.

Setup in the app factory:
    from sweeper.scheduler import init_scheduler
    init_scheduler(app)
"""
from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sweeper.extensions import EXTENSION_KEY
from sweeper.sweep import ScanOrchestrator
from sweeper.sweep.errors import ScanInProgress, ScanLevelFailure

logger = logging.getLogger("scheduler")
logger.setLevel(logging.INFO)

_scheduler: BackgroundScheduler | None = None


def run_scheduled_sweep(orchestrator: ScanOrchestrator) -> None:
    """One scheduler tick."""
    try:
        result = orchestrator.run_scan().raise_for_status()
    except ScanInProgress:
        logger.info("Scheduled sweep skipped: a sweep is already running")
        return
    except ScanLevelFailure as e:
        logger.error(f"Scheduled sweep failed: {e}")
        return

    logger.info(
        f"Scheduled sweep finished: {result.instances_scanned} instances, "
        f"{result.suspensions} suspensions"
    )


def init_scheduler(app) -> BackgroundScheduler | None:
    """Start the interval job if the app config asks for one."""
    global _scheduler

    config = app.config["SWEEP"]
    if not config.scan_interval_minutes:
        logger.info("Periodic sweeps disabled (SWEEP_INTERVAL_MINUTES not set)")
        return None

    if _scheduler is not None and _scheduler.running:
        logger.warning("Sweep scheduler already running")
        return _scheduler

    orchestrator = app.extensions[EXTENSION_KEY]
    _scheduler = BackgroundScheduler(daemon=True)
    _scheduler.add_job(
        run_scheduled_sweep,
        trigger=IntervalTrigger(minutes=config.scan_interval_minutes),
        args=[orchestrator],
        id="periodic_sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    logger.info(f"Sweep scheduler started (every {config.scan_interval_minutes} min)")
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
