# sweeper/sweep/orchestrator.py
"""
Scan Orchestrator — one full sweep over the fleet.

    1. Reset the log sink
    2. Enumerate active instances (control plane)
    3. For each instance, in order: walk its filesystem from the root
       (node agent), suspending on detection
    4. Return the accumulated log as a ScanResult

Instances are processed strictly one at a time. Only one scan may run per
orchestrator; a second run_scan() while one is in flight raises
ScanInProgress instead of wiping the running scan's log.

Usage:
    from sweeper.sweep import ScanOrchestrator

    orchestrator = ScanOrchestrator.from_config(config)
    result = orchestrator.run_scan()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

import requests

from sweeper.config import SweepConfig
from sweeper.sweep.actuator import SuspensionActuator
from sweeper.sweep.base import Detection, FileRecord, LogEntry, ScanResult, now_utc
from sweeper.sweep.classifier import classify
from sweeper.sweep.clients import ControlPlaneClient, NodeAgentClient
from sweeper.sweep.enumerator import InstanceEnumerator
from sweeper.sweep.errors import ScanInProgress, ScanLevelFailure
from sweeper.sweep.log_sink import LogSink, LogSubscription
from sweeper.sweep.walker import DirectoryWalker

logger = logging.getLogger(__name__)


class ScanOrchestrator:

    def __init__(self, control_plane: ControlPlaneClient, node_agent: NodeAgentClient,
                 sink: Optional[LogSink] = None,
                 classifier: Callable[[FileRecord], List[Detection]] = classify):
        self.control_plane = control_plane
        self.node_agent = node_agent
        self.sink = sink or LogSink()
        self.classifier = classifier
        self._lock = threading.Lock()
        self.last_result: Optional[ScanResult] = None

    @classmethod
    def from_config(cls, config: SweepConfig,
                    session: Optional[requests.Session] = None) -> "ScanOrchestrator":
        """Build clients from config. One session is shared by both clients."""
        session = session or requests.Session()
        return cls(
            control_plane=ControlPlaneClient.from_config(config, session=session),
            node_agent=NodeAgentClient.from_config(config, session=session),
        )

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run_scan(self) -> ScanResult:
        """
        Run one sweep to completion and return its result.

        Raises ScanInProgress if another scan is running. Every other
        failure is contained: per-call errors are logged, and an error
        escaping the loop yields ScanResult(success=False).
        """
        if not self._lock.acquire(blocking=False):
            raise ScanInProgress()

        try:
            self.sink.reset()
            result = ScanResult(started_at=now_utc())
            actuator = SuspensionActuator(self.control_plane, self.sink)
            walker = DirectoryWalker(self.node_agent, actuator, self.sink, classifier=self.classifier)
            enumerator = InstanceEnumerator(self.control_plane, self.sink)

            logger.info("Sweep started")
            try:
                for instance in enumerator.list_active_instances():
                    self.sink.append(f"Processing instance with ID: {instance.id}")
                    walker.walk(instance.id, "")
                    result.instances_scanned += 1
            except Exception as e:
                logger.exception("Sweep aborted")
                failure = ScanLevelFailure(str(e))
                self.sink.append(f"Error processing instances: {failure}")
                result.success = False
                result.error = str(failure)

            result.suspensions = actuator.succeeded
            result.finished_at = now_utc()
            result.logs = self.sink.snapshot()
            logger.info(
                "Sweep %s: %d instances, %d directories, %d files, %d suspensions in %.2fs",
                "completed" if result.success else "failed",
                result.instances_scanned, walker.directories_listed, walker.files_seen,
                result.suspensions, result.duration_seconds,
            )
            self.last_result = result
            return result
        finally:
            self._lock.release()

    def snapshot(self) -> List[LogEntry]:
        """Current scan log; safe to call while a scan is running."""
        return self.sink.snapshot()

    def subscribe(self, replay: bool = True) -> LogSubscription:
        """Push feed of log entries (see LogSink.subscribe)."""
        return self.sink.subscribe(replay=replay)
