import json

import pytest

from sweeper.config import DEFAULT_NODE_AGENT_USERNAME, DEFAULT_PORT, SweepConfig


def test_from_env_reads_every_setting():
    config = SweepConfig.from_env({
        "CONTROL_PLANE_URL": "https://panel.example/",
        "CONTROL_PLANE_KEY": "cp",
        "NODE_AGENT_URL": "http://node.example:8080",
        "NODE_AGENT_KEY": "nk",
        "NODE_AGENT_USERNAME": "Agent",
        "SWEEP_REQUEST_TIMEOUT": "2.5",
        "SWEEP_INTERVAL_MINUTES": "30",
        "PORT": "8000",
    })

    assert config.control_plane_url == "https://panel.example"
    assert config.control_plane_key == "cp"
    assert config.node_agent_url == "http://node.example:8080"
    assert config.node_agent_key == "nk"
    assert config.node_agent_username == "Agent"
    assert config.request_timeout == 2.5
    assert config.scan_interval_minutes == 30
    assert config.port == 8000


def test_from_env_defaults():
    config = SweepConfig.from_env({})

    assert config.control_plane_url == ""
    assert config.node_agent_url == ""
    assert config.node_agent_username == DEFAULT_NODE_AGENT_USERNAME
    assert config.request_timeout is None
    assert config.scan_interval_minutes is None
    assert config.port == DEFAULT_PORT


def test_blank_optional_values_are_unset():
    config = SweepConfig.from_env({"SWEEP_REQUEST_TIMEOUT": " ", "SWEEP_INTERVAL_MINUTES": ""})
    assert config.request_timeout is None
    assert config.scan_interval_minutes is None


def test_from_dict_legacy_layout():
    config = SweepConfig.from_dict({
        "port": 3001,
        "hydra": {"url": "https://panel.example/", "key": "cp"},
        "node": {"url": "http://node.example:8080/", "key": "nk"},
    })

    assert config.control_plane_url == "https://panel.example"
    assert config.node_agent_url == "http://node.example:8080"
    assert config.node_agent_username == "Skyport"
    assert config.port == 3001


def test_from_dict_tolerates_missing_sections():
    config = SweepConfig.from_dict({})
    assert config.control_plane_url == ""
    assert config.node_agent_key == ""


def test_from_json_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "hydra": {"url": "http://cp", "key": "a"},
        "node": {"url": "http://node", "key": "b"},
        "requestTimeout": 10,
        "scanIntervalMinutes": 5,
    }))

    config = SweepConfig.from_json_file(str(path))

    assert config.control_plane_key == "a"
    assert config.request_timeout == 10.0
    assert config.scan_interval_minutes == 5


def test_load_prefers_config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"hydra": {"url": "http://from-file", "key": "k"}}))
    monkeypatch.setenv("SWEEP_CONFIG_FILE", str(path))
    monkeypatch.setenv("CONTROL_PLANE_URL", "http://from-env")

    assert SweepConfig.load().control_plane_url == "http://from-file"


def test_load_falls_back_to_env(monkeypatch):
    monkeypatch.delenv("SWEEP_CONFIG_FILE", raising=False)
    monkeypatch.setenv("CONTROL_PLANE_URL", "http://from-env")

    assert SweepConfig.load().control_plane_url == "http://from-env"


def test_config_is_immutable():
    config = SweepConfig.from_env({})
    with pytest.raises(AttributeError):
        config.port = 1
