# sweeper/sweep/base.py
"""
Data structures for the abuse sweep pipeline.

Architecture:
    Orchestrator → Enumerator → (per instance) Walker → Classifier → Actuator

Instance:    One hosted workload as reported by the control plane.
FileRecord:  One entry of a node agent directory listing. Transient.
Detection:   One classifier result (verdict + reason).
LogEntry:    One timestamped message in the scan log.
ScanResult:  What a caller of run_scan() gets back.

These objects carry no behaviour beyond parsing upstream payloads, so the
classifier and walker can be tested without any HTTP in the way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from sweeper.sweep.errors import ScanLevelFailure


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_utc() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def isoformat(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix, e.g. 2024-05-01T10:00:00.123Z"""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


# ---------------------------------------------------------------------------
# Upstream records
# ---------------------------------------------------------------------------

@dataclass
class Instance:
    """
    A hosted instance as returned by GET /api/instances.

    The control plane keys the identifier as "Id"; "id" is accepted too.
    `raw` keeps the full payload for anything the sweep does not model.
    """
    id: Any
    suspended: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Instance":
        ident = payload.get("Id", payload.get("id"))
        return cls(
            id=ident,
            suspended=_as_bool(payload.get("suspended", False)),
            raw=dict(payload),
        )


@dataclass
class FileRecord:
    """
    One entry of GET /fs/{id}/files.

    Fields:
        name:          Bare file name, e.g. "server.jar"
        extension:     Extension as reported by the agent, e.g. ".jar"
        purpose:       Free-form tag from the agent ("script", "config", ...)
        is_directory:  Entry is a directory
        is_editable:   Agent allows editing it in the panel (text files)
        size:          Human size with unit suffix, e.g. "17MB", "512 KB", "40B"
    """
    name: str
    extension: str = ""
    purpose: str = ""
    is_directory: bool = False
    is_editable: bool = False
    size: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "FileRecord":
        size = payload.get("size")
        return cls(
            name=str(payload.get("name") or ""),
            extension=str(payload.get("extension") or ""),
            purpose=str(payload.get("purpose") or ""),
            is_directory=_as_bool(payload.get("isDirectory", False)),
            is_editable=_as_bool(payload.get("isEditable", False)),
            size="" if size is None else str(size),
        )

    @property
    def should_descend(self) -> bool:
        """Directories are walked unless the agent flags them editable."""
        return self.is_directory and not self.is_editable


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class Verdict(Enum):
    CLEAN = "clean"
    SUSPICIOUS_SCRIPT = "suspicious_script"
    SUSPICIOUS_MINER = "suspicious_miner"
    SUSPICIOUS_JAR_SIZE = "suspicious_jar_size"
    UNKNOWN_SIZE_FORMAT = "unknown_size_format"

    @property
    def is_suspicious(self) -> bool:
        return self in (
            Verdict.SUSPICIOUS_SCRIPT,
            Verdict.SUSPICIOUS_MINER,
            Verdict.SUSPICIOUS_JAR_SIZE,
        )


@dataclass(frozen=True)
class Detection:
    """A single classifier outcome. `reason` is empty for CLEAN."""
    verdict: Verdict
    reason: str = ""


# ---------------------------------------------------------------------------
# Scan log + results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"timestamp": self.timestamp, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.timestamp}] {self.message}"


@dataclass(frozen=True)
class LogReset:
    """Pushed to subscribers when the log is cleared for a new scan."""
    timestamp: str

    def to_dict(self) -> Dict[str, str]:
        return {"timestamp": self.timestamp}


@dataclass
class ScanResult:
    """
    Outcome of one ScanOrchestrator.run_scan() call.

    success is False only for a scan-level failure (an exception that
    escaped the orchestrator loop). Per-call failures are in the log and
    do not flip it.
    """
    success: bool = True
    logs: List[LogEntry] = field(default_factory=list)
    error: Optional[str] = None
    instances_scanned: int = 0
    suspensions: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if not self.started_at or not self.finished_at:
            return 0.0
        return round((self.finished_at - self.started_at).total_seconds(), 2)

    def raise_for_status(self) -> "ScanResult":
        """Raise ScanLevelFailure if the scan itself failed, otherwise return self."""
        if not self.success:
            raise ScanLevelFailure(self.error or "scan failed")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "instancesScanned": self.instances_scanned,
            "suspensions": self.suspensions,
            "durationSeconds": self.duration_seconds,
            "logs": [e.to_dict() for e in self.logs],
        }
