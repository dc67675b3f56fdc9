import logging
from dataclasses import replace

import pytest

from sweeper import create_app, scheduler
from sweeper.sweep.base import ScanResult
from sweeper.sweep.errors import ScanInProgress


class StubOrchestrator:

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def run_scan(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def _stop_scheduler():
    yield
    scheduler.shutdown_scheduler()


def test_tick_logs_summary(caplog):
    stub = StubOrchestrator(ScanResult(instances_scanned=3, suspensions=1))

    with caplog.at_level(logging.INFO, logger="scheduler"):
        scheduler.run_scheduled_sweep(stub)

    assert stub.calls == 1
    assert "Scheduled sweep finished: 3 instances, 1 suspensions" in caplog.text


def test_tick_skips_when_scan_running(caplog):
    stub = StubOrchestrator(error=ScanInProgress())

    with caplog.at_level(logging.INFO, logger="scheduler"):
        scheduler.run_scheduled_sweep(stub)

    assert "Scheduled sweep skipped" in caplog.text


def test_tick_reports_scan_level_failure(caplog):
    stub = StubOrchestrator(ScanResult(success=False, error="boom"))

    with caplog.at_level(logging.INFO, logger="scheduler"):
        scheduler.run_scheduled_sweep(stub)

    assert "Scheduled sweep failed: boom" in caplog.text


def test_no_interval_means_no_scheduler(app_factory):
    app = app_factory(scan_interval_minutes=None)
    assert scheduler.init_scheduler(app) is None


def test_interval_registers_single_job(app_factory):
    app = app_factory(scan_interval_minutes=15)

    sched = scheduler.init_scheduler(app)

    assert sched is not None and sched.running
    [job] = sched.get_jobs()
    assert job.id == "periodic_sweep"
    assert job.max_instances == 1
    assert job.coalesce is True
    assert scheduler.init_scheduler(app) is sched


@pytest.fixture
def app_factory(config, orchestrator, monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")

    def make(**overrides):
        return create_app(config=replace(config, **overrides), orchestrator=orchestrator)

    return make
