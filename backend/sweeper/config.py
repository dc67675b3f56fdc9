# sweeper/config.py
"""
Sweep configuration.

One explicit SweepConfig is built at startup and handed to every component
that talks to an upstream API. Two sources are supported:

    Environment (default):
        CONTROL_PLANE_URL, CONTROL_PLANE_KEY
        NODE_AGENT_URL, NODE_AGENT_KEY, NODE_AGENT_USERNAME
        SWEEP_REQUEST_TIMEOUT   seconds, unset = wait forever
        SWEEP_INTERVAL_MINUTES  unset = no periodic sweeps
        PORT

    JSON file (SWEEP_CONFIG_FILE), legacy layout:
        {"port": 3000,
         "hydra": {"url": "...", "key": "..."},
         "node":  {"url": "...", "key": "..."}}

Missing URLs are NOT an error here; the clients report them per call so a
misconfigured deployment still serves its log endpoints.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_NODE_AGENT_USERNAME = "Skyport"
DEFAULT_PORT = 3000


def _optional_float(value: Any) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    return int(value)


@dataclass(frozen=True)
class SweepConfig:
    control_plane_url: str = ""
    control_plane_key: str = ""
    node_agent_url: str = ""
    node_agent_key: str = ""
    node_agent_username: str = DEFAULT_NODE_AGENT_USERNAME
    request_timeout: Optional[float] = None
    scan_interval_minutes: Optional[int] = None
    port: int = DEFAULT_PORT

    def __post_init__(self):
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "control_plane_url", (self.control_plane_url or "").rstrip("/"))
        object.__setattr__(self, "node_agent_url", (self.node_agent_url or "").rstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SweepConfig":
        env = os.environ if environ is None else environ
        return cls(
            control_plane_url=env.get("CONTROL_PLANE_URL", ""),
            control_plane_key=env.get("CONTROL_PLANE_KEY", ""),
            node_agent_url=env.get("NODE_AGENT_URL", ""),
            node_agent_key=env.get("NODE_AGENT_KEY", ""),
            node_agent_username=env.get("NODE_AGENT_USERNAME") or DEFAULT_NODE_AGENT_USERNAME,
            request_timeout=_optional_float(env.get("SWEEP_REQUEST_TIMEOUT")),
            scan_interval_minutes=_optional_int(env.get("SWEEP_INTERVAL_MINUTES")),
            port=_optional_int(env.get("PORT")) or DEFAULT_PORT,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SweepConfig":
        """Build from the legacy {"hydra": {...}, "node": {...}} layout."""
        hydra = data.get("hydra") or {}
        node = data.get("node") or {}
        return cls(
            control_plane_url=hydra.get("url", ""),
            control_plane_key=hydra.get("key", ""),
            node_agent_url=node.get("url", ""),
            node_agent_key=node.get("key", ""),
            node_agent_username=node.get("username") or DEFAULT_NODE_AGENT_USERNAME,
            request_timeout=_optional_float(data.get("requestTimeout")),
            scan_interval_minutes=_optional_int(data.get("scanIntervalMinutes")),
            port=_optional_int(data.get("port")) or DEFAULT_PORT,
        )

    @classmethod
    def from_json_file(cls, path: str) -> "SweepConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def load(cls) -> "SweepConfig":
        """SWEEP_CONFIG_FILE if set, otherwise the environment."""
        path = os.getenv("SWEEP_CONFIG_FILE")
        if path:
            return cls.from_json_file(path)
        return cls.from_env()
