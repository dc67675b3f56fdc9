# sweeper/sweep/enumerator.py
"""
Instance enumerator — which instances does this sweep visit?

Fetches the full inventory from the control plane and drops anything
already suspended. Failures are logged to the scan log and produce an
empty list; this never raises.
"""

from __future__ import annotations

import logging
from typing import List

from sweeper.sweep.base import Instance
from sweeper.sweep.clients import ControlPlaneClient
from sweeper.sweep.errors import ConfigurationMissing, TransportError, UnexpectedResponseShape
from sweeper.sweep.log_sink import LogSink

logger = logging.getLogger(__name__)


class InstanceEnumerator:

    def __init__(self, client: ControlPlaneClient, sink: LogSink):
        self.client = client
        self.sink = sink

    def list_active_instances(self) -> List[Instance]:
        """Non-suspended instances, in the order the control plane returned them."""
        try:
            payload = self.client.fetch_instances()
        except ConfigurationMissing as e:
            self.sink.append(str(e))
            return []
        except TransportError as e:
            if e.status_code is not None:
                self.sink.append(f"Failed to retrieve instances. Status: {e.status_code}")
            else:
                self.sink.append(f"Error retrieving instances: {e}")
            return []
        except UnexpectedResponseShape as e:
            self.sink.append(f"Error retrieving instances: {e}")
            return []

        if not payload:
            self.sink.append("No data received in response")
            return []

        if not isinstance(payload, list):
            self.sink.append(
                f"Error retrieving instances: expected a list, got {type(payload).__name__}"
            )
            return []

        instances = []
        for item in payload:
            if not isinstance(item, dict):
                logger.debug("Skipping non-object entry in instance list: %r", item)
                continue
            instances.append(Instance.from_api(item))
        active = [i for i in instances if not i.suspended]
        logger.debug("Control plane returned %d instances, %d active", len(instances), len(active))
        return active
