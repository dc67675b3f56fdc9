# sweeper/sweep/walker.py
"""
Remote directory walker.

Depth-first walk of one instance's filesystem through the node agent:

    for each record in the listing (agent order):
        1. log the record
        2. descend if it is a directory the agent does not flag editable
        3. classify; suspend once per suspicious detection
        4. on an unparsable server.jar size, log it and stop this listing

Step 4 abandons every remaining sibling in the listing, not just the one
record. Parent listings continue normally.

Child paths are joined onto the parent ("plugins" → "plugins/worldedit").
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Callable, List

from sweeper.sweep.actuator import SuspensionActuator
from sweeper.sweep.base import Detection, FileRecord, Verdict
from sweeper.sweep.classifier import classify
from sweeper.sweep.clients import NodeAgentClient
from sweeper.sweep.errors import (
    ConfigurationMissing,
    InvalidResponseBody,
    TransportError,
    UnexpectedResponseShape,
)
from sweeper.sweep.log_sink import LogSink

logger = logging.getLogger(__name__)

# Scan-log line emitted after the suspend call for each verdict.
DETECTION_MESSAGES = {
    Verdict.SUSPICIOUS_SCRIPT: "Suspicious .sh file detected in server: {id}",
    Verdict.SUSPICIOUS_MINER: "Suspicious mining activity detected in server: {id}",
    Verdict.SUSPICIOUS_JAR_SIZE: "Suspicious server.jar file size detected: {id}",
}


def join_path(parent: str, name: str) -> str:
    """Agent-relative child path. The root listing is the empty string."""
    parent = (parent or "").strip("/")
    name = (name or "").lstrip("/")
    if not parent:
        return name
    return posixpath.join(parent, name)


class DirectoryWalker:

    def __init__(self, node_agent: NodeAgentClient, actuator: SuspensionActuator, sink: LogSink,
                 classifier: Callable[[FileRecord], List[Detection]] = classify):
        self.node_agent = node_agent
        self.actuator = actuator
        self.sink = sink
        self.classifier = classifier
        self.directories_listed = 0
        self.files_seen = 0

    def walk(self, instance_id: Any, path: str = "") -> None:
        """Walk `path` and everything below it. Never raises."""
        try:
            raw_files = self.node_agent.list_files(instance_id, path)
        except ConfigurationMissing as e:
            self.sink.append(str(e))
            return
        except InvalidResponseBody as e:
            self._log_listing_error(instance_id, path, e)
            return
        except UnexpectedResponseShape as e:
            self.sink.append(str(e))
            return
        except TransportError as e:
            if e.status_code is not None:
                self.sink.append(
                    f"Failed to retrieve files for instance with ID: {instance_id} "
                    f"at path: {path}. Status: {e.status_code}"
                )
            else:
                self._log_listing_error(instance_id, path, e)
            return

        self.directories_listed += 1
        self._process_listing(instance_id, path, raw_files)

    def _log_listing_error(self, instance_id: Any, path: str, error: Exception) -> None:
        self.sink.append(
            f"Error retrieving files for instance with ID: {instance_id} at path: {path}: {error}"
        )

    def _process_listing(self, instance_id: Any, path: str, raw_files: List[Any]) -> None:
        for raw in raw_files:
            if not isinstance(raw, dict):
                logger.debug("Skipping non-object entry in %s listing for %s", path or "/", instance_id)
                continue
            record = FileRecord.from_api(raw)
            self.files_seen += 1

            self.sink.append(
                f"File: {record.name} Extension: {record.extension} Purpose: {record.purpose}"
            )

            if record.should_descend:
                self.walk(instance_id, join_path(path, record.name))

            for detection in self.classifier(record):
                if detection.verdict is Verdict.UNKNOWN_SIZE_FORMAT:
                    self.sink.append(detection.reason)
                    logger.warning(
                        "Abandoning listing %s of instance %s after %s",
                        path or "/", instance_id, detection.reason,
                    )
                    return
                if detection.verdict.is_suspicious:
                    self.actuator.suspend(instance_id)
                    self.sink.append(DETECTION_MESSAGES[detection.verdict].format(id=instance_id))
