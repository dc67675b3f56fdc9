import re

import pytest
import requests

from sweeper.config import SweepConfig
from sweeper.sweep.clients import ControlPlaneClient, NodeAgentClient
from sweeper.sweep.log_sink import LogSink
from sweeper.sweep.orchestrator import ScanOrchestrator

CP_URL = "http://panel.test"
NODE_URL = "http://node.test:8080"
FILES_RE = re.compile(r"/fs/(?P<id>[^/]+)/files$")


class FakeResponse:

    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """
    Stand-in for requests.Session that serves the control plane and node
    agent from in-memory fixtures and records every call.

        instances:      payload for GET /api/instances (or FakeResponse / Exception)
        suspend_status: status for GET /api/instances/suspend (or Exception)
        trees:          {(instance_id, path): [file dicts] | FakeResponse | Exception}
    """

    def __init__(self, instances=None, trees=None, suspend_status=200):
        self.instances = instances if instances is not None else []
        self.trees = trees or {}
        self.suspend_status = suspend_status
        self.calls = []

    @staticmethod
    def _serve(value, wrap=lambda v: v):
        if isinstance(value, Exception):
            raise value
        if isinstance(value, FakeResponse):
            return value
        return FakeResponse(200, wrap(value))

    def get(self, url, params=None, auth=None, timeout=None, headers=None):
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "auth": auth, "timeout": timeout})

        if url.endswith("/api/instances/suspend"):
            if isinstance(self.suspend_status, Exception):
                raise self.suspend_status
            return FakeResponse(self.suspend_status, {"status": "ok"})

        if url.endswith("/api/instances"):
            return self._serve(self.instances)

        m = FILES_RE.search(url)
        if m:
            key = (m.group("id"), params.get("path", ""))
            if key not in self.trees:
                return FakeResponse(404, {"error": "not found"})
            return self._serve(self.trees[key], wrap=lambda files: {"files": files})

        return FakeResponse(404, None)

    # helpers for assertions
    def suspend_calls(self):
        return [c for c in self.calls if c["url"].endswith("/api/instances/suspend")]

    def listed_paths(self, instance_id):
        return [
            c["params"].get("path")
            for c in self.calls
            if c["url"].endswith(f"/fs/{instance_id}/files")
        ]


def file_entry(name, extension="", purpose="", is_directory=False, is_editable=False, size="1KB"):
    return {
        "name": name,
        "extension": extension,
        "purpose": purpose,
        "isDirectory": is_directory,
        "isEditable": is_editable,
        "size": size,
    }


@pytest.fixture
def config():
    return SweepConfig(
        control_plane_url=CP_URL,
        control_plane_key="cp-key",
        node_agent_url=NODE_URL,
        node_agent_key="node-key",
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def sink():
    return LogSink(mirror_to_logger=False)


@pytest.fixture
def control_plane(config, session):
    return ControlPlaneClient.from_config(config, session=session)


@pytest.fixture
def node_agent(config, session):
    return NodeAgentClient.from_config(config, session=session)


@pytest.fixture
def orchestrator(control_plane, node_agent, sink):
    return ScanOrchestrator(control_plane, node_agent, sink=sink)


def messages(entries):
    return [e.message for e in entries]


def connection_error(msg="connect ECONNREFUSED"):
    return requests.ConnectionError(msg)
