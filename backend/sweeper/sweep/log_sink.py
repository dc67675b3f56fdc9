# sweeper/sweep/log_sink.py
"""
Append-only scan log with push delivery.

One LogSink belongs to one ScanOrchestrator. The orchestrator resets it at
the start of every scan; the scan thread is the only writer. Readers either
take a snapshot() or subscribe() and receive entries as they are appended,
with a LogReset marker wherever a new scan cleared the log.

Every message is also mirrored to the stdlib logger so sweeps show up in
the server log without anyone watching the dashboard.
"""

from __future__ import annotations

import logging
import queue
import threading
from datetime import datetime
from typing import Iterator, List, Optional, Union

from sweeper.sweep.base import LogEntry, LogReset, isoformat, now_utc

logger = logging.getLogger(__name__)

# Per-subscriber backlog. A subscriber that falls further behind than this
# starts losing entries; snapshot() is still complete.
SUBSCRIBER_QUEUE_SIZE = 5000

# What a subscriber receives: log entries, and a LogReset when a new scan
# clears the log.
FeedItem = Union[LogEntry, LogReset]


class LogSubscription:
    """
    A live feed of LogEntry objects (and LogReset markers) from a LogSink.

    Use as a context manager so the sink drops the subscriber on exit:

        with sink.subscribe() as sub:
            entry = sub.get(timeout=15)
    """

    def __init__(self, sink: "LogSink", maxsize: Optional[int] = None):
        self._sink = sink
        self._queue: "queue.Queue[FeedItem]" = queue.Queue(maxsize=maxsize or SUBSCRIBER_QUEUE_SIZE)
        self.dropped = 0
        self.closed = False

    def _push(self, entry: FeedItem) -> None:
        try:
            self._queue.put_nowait(entry)
        except queue.Full:
            self.dropped += 1
            if self.dropped == 1:
                logger.warning("Log subscriber is not keeping up, dropping entries")

    def get(self, timeout: Optional[float] = None) -> Optional[FeedItem]:
        """Next entry, or None if nothing arrived within `timeout` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[FeedItem]:
        """Everything currently queued, without blocking."""
        out: List[FeedItem] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except queue.Empty:
                return out

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._sink._unsubscribe(self)

    def __enter__(self) -> "LogSubscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LogSink:

    def __init__(self, mirror_to_logger: bool = True):
        self._lock = threading.Lock()
        self._entries: List[LogEntry] = []
        self._subscribers: List[LogSubscription] = []
        self._last_ts: Optional[datetime] = None
        self._mirror = mirror_to_logger

    def reset(self) -> None:
        """Drop all entries. Subscribers stay attached and receive a LogReset."""
        with self._lock:
            self._entries = []
            marker = LogReset(timestamp=isoformat(now_utc()))
            for sub in self._subscribers:
                sub._push(marker)

    def append(self, message: str) -> LogEntry:
        """Stamp `message` with the current UTC time and record it."""
        with self._lock:
            ts = now_utc()
            # Wall clock can step backwards; entries must not.
            if self._last_ts is not None and ts < self._last_ts:
                ts = self._last_ts
            self._last_ts = ts
            entry = LogEntry(timestamp=isoformat(ts), message=message)
            self._entries.append(entry)
            for sub in self._subscribers:
                sub._push(entry)

        if self._mirror:
            logger.info(message)
        return entry

    def snapshot(self) -> List[LogEntry]:
        """All entries since the last reset, in insertion order."""
        with self._lock:
            return list(self._entries)

    def subscribe(self, replay: bool = False) -> LogSubscription:
        """
        Attach a new subscriber.

        With replay=True the current snapshot is queued first, atomically
        with registration, so the subscriber sees no gap and no duplicate.
        """
        sub = LogSubscription(self)
        with self._lock:
            if replay:
                for entry in self._entries:
                    sub._push(entry)
            self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: LogSubscription) -> None:
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.snapshot())
