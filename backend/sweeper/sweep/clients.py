# sweeper/sweep/clients.py
"""
HTTP clients for the two upstream APIs.

    ControlPlaneClient — instance inventory + suspend
        GET {url}/api/instances?key=K
        GET {url}/api/instances/suspend?key=K&id=ID

    NodeAgentClient — per-node filesystem listing
        GET {url}/fs/{instance_id}/files?path=P   (HTTP basic auth)

Clients only move bytes. They raise the errors in sweeper.sweep.errors and
never write to the scan log; the enumerator, actuator and walker do that.
A requests.Session can be injected, which is how the tests run offline.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from sweeper.config import SweepConfig
from sweeper.sweep.errors import (
    ConfigurationMissing,
    InvalidResponseBody,
    TransportError,
    UnexpectedResponseShape,
)

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "abuse-sweep/1.0", "Accept": "application/json"}


class _BaseClient:

    def __init__(self, base_url: Optional[str], timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _require_base_url(self) -> str:
        if not self.base_url:
            raise ConfigurationMissing()
        return self.base_url

    def _get(self, path: str, params: Dict[str, Any], auth=None) -> requests.Response:
        """GET {base_url}{path}; non-200 and network failures become TransportError."""
        url = f"{self._require_base_url()}{path}"
        try:
            r = self.session.get(url, params=params, auth=auth, timeout=self.timeout, headers=HEADERS)
        except requests.RequestException as e:
            logger.debug("GET %s failed: %s", url, e)
            raise TransportError(str(e)) from e

        if r.status_code != 200:
            logger.debug("GET %s → %d", url, r.status_code)
            raise TransportError(f"HTTP {r.status_code}", status_code=r.status_code)
        return r

    @staticmethod
    def _json(r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise InvalidResponseBody(f"Response is not valid JSON: {e}") from e


class ControlPlaneClient(_BaseClient):

    def __init__(self, base_url: Optional[str], api_key: str = "",
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        super().__init__(base_url, timeout=timeout, session=session)
        self.api_key = api_key or ""

    @classmethod
    def from_config(cls, config: SweepConfig, session: Optional[requests.Session] = None) -> "ControlPlaneClient":
        return cls(config.control_plane_url, config.control_plane_key,
                   timeout=config.request_timeout, session=session)

    def fetch_instances(self) -> Any:
        """
        Raw instance payload. Normally a list of dicts with "Id" and
        "suspended"; shape checks are the caller's business.
        """
        r = self._get("/api/instances", params={"key": self.api_key})
        return self._json(r)

    def suspend_instance(self, instance_id: Any) -> int:
        """Ask the control plane to suspend one instance. Returns the HTTP status."""
        r = self._get("/api/instances/suspend", params={"key": self.api_key, "id": instance_id})
        return r.status_code


class NodeAgentClient(_BaseClient):

    def __init__(self, base_url: Optional[str], api_key: str = "", username: str = "Skyport",
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        super().__init__(base_url, timeout=timeout, session=session)
        self.auth = (username, api_key or "")

    @classmethod
    def from_config(cls, config: SweepConfig, session: Optional[requests.Session] = None) -> "NodeAgentClient":
        return cls(config.node_agent_url, config.node_agent_key,
                   username=config.node_agent_username,
                   timeout=config.request_timeout, session=session)

    def list_files(self, instance_id: Any, path: str = "") -> List[Dict[str, Any]]:
        """
        Directory listing for one instance.

        Returns the "files" array. Raises UnexpectedResponseShape if the
        field is missing or is not a list.
        """
        r = self._get(f"/fs/{instance_id}/files", params={"path": path}, auth=self.auth)
        payload = self._json(r)
        files = payload.get("files") if isinstance(payload, dict) else None
        if not isinstance(files, list):
            raise UnexpectedResponseShape("Files field is missing or not an array.")
        return files
