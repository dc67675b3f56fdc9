# sweeper/sweep/classifier.py
"""
File record classifier.

Pure functions: a FileRecord goes in, a list of Detections comes out.
No I/O, no suspension; the walker decides what to do with the result.

Rules (evaluated independently, all matches reported, in this order):
    1. purpose == "script"                 → SUSPICIOUS_SCRIPT
    2. name == "xmrig"                     → SUSPICIOUS_MINER
    3. name == "server.jar" and < 18 MiB   → SUSPICIOUS_JAR_SIZE
       (size with an unknown unit          → UNKNOWN_SIZE_FORMAT)

A genuine Minecraft server.jar is well above 18 MiB; anything smaller is
usually a renamed launcher for something else.
"""

from __future__ import annotations

import re
from typing import List

from sweeper.sweep.base import Detection, FileRecord, Verdict
from sweeper.sweep.errors import UnknownSizeFormat

SCRIPT_PURPOSE = "script"
MINER_NAMES = frozenset({"xmrig"})
SERVER_JAR_NAME = "server.jar"
MIN_SERVER_JAR_BYTES = 18 * 1024 * 1024

# Longest suffix first so "MB" is not read as "B".
SIZE_UNITS = (
    ("MB", 1024 * 1024),
    ("KB", 1024),
    ("B", 1),
)

_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$|^\.\d+$")


def parse_size(size: str) -> int:
    """
    Convert an agent size string to bytes.

        "17MB"   → 17825792
        "2000KB" → 2048000
        "512 B"  → 512
        "5GB"    → UnknownSizeFormat

    Raises UnknownSizeFormat for any other unit or a non-numeric value.
    """
    text = (size or "").strip()
    for suffix, multiplier in SIZE_UNITS:
        if text.endswith(suffix):
            number = text[: -len(suffix)].strip()
            if not _NUMBER_RE.match(number):
                break
            return int(float(number) * multiplier)
    raise UnknownSizeFormat(size)


def classify(record: FileRecord) -> List[Detection]:
    """
    Classify one file record.

    Returns every matching Detection, or a single CLEAN detection when no
    rule fires. Never raises.
    """
    detections: List[Detection] = []

    if record.purpose == SCRIPT_PURPOSE:
        detections.append(Detection(
            Verdict.SUSPICIOUS_SCRIPT,
            f"File {record.name} is tagged as a script",
        ))

    if record.name in MINER_NAMES:
        detections.append(Detection(
            Verdict.SUSPICIOUS_MINER,
            f"Known miner binary name: {record.name}",
        ))

    if record.name == SERVER_JAR_NAME:
        try:
            size_bytes = parse_size(record.size)
        except UnknownSizeFormat as e:
            detections.append(Detection(Verdict.UNKNOWN_SIZE_FORMAT, str(e)))
        else:
            if size_bytes < MIN_SERVER_JAR_BYTES:
                detections.append(Detection(
                    Verdict.SUSPICIOUS_JAR_SIZE,
                    f"server.jar is only {size_bytes} bytes (< {MIN_SERVER_JAR_BYTES})",
                ))

    return detections or [Detection(Verdict.CLEAN)]


def verdicts(record: FileRecord) -> List[Verdict]:
    """Shorthand for the verdicts of classify(record)."""
    return [d.verdict for d in classify(record)]
