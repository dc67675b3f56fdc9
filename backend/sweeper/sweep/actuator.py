# sweeper/sweep/actuator.py
"""
Suspension actuator.

Issues one suspend call per detection. The same instance is routinely
suspended more than once in a scan (a miner AND a script in one tree);
each call is made and logged on its own, and none of them is an error.
"""

from __future__ import annotations

import logging
from typing import Any

from sweeper.sweep.clients import ControlPlaneClient
from sweeper.sweep.errors import ConfigurationMissing, SweepError, TransportError
from sweeper.sweep.log_sink import LogSink

logger = logging.getLogger(__name__)


class SuspensionActuator:

    def __init__(self, client: ControlPlaneClient, sink: LogSink):
        self.client = client
        self.sink = sink
        self.calls = 0
        self.succeeded = 0

    def suspend(self, instance_id: Any) -> bool:
        """Suspend one instance. Returns True if the control plane accepted it."""
        self.calls += 1
        try:
            self.client.suspend_instance(instance_id)
        except ConfigurationMissing as e:
            self.sink.append(str(e))
            return False
        except TransportError as e:
            if e.status_code is not None:
                self.sink.append(
                    f"Failed to suspend server with ID: {instance_id}. Status: {e.status_code}"
                )
            else:
                self.sink.append(f"Error suspending server with ID: {instance_id}: {e}")
            return False
        except SweepError as e:
            self.sink.append(f"Error suspending server with ID: {instance_id}: {e}")
            return False

        self.succeeded += 1
        self.sink.append(f"Server with ID: {instance_id} has been suspended successfully.")
        return True
