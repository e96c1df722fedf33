"""
Unit tests for configuration loading and environment handling.
"""

import os

import pytest

from chatsync.core.exceptions import ConfigurationError
from chatsync.utils.config import (
    CONFIG_PATH_ENV_VAR,
    get_component_config,
    get_section,
    load_config,
    require_keys,
    resolve_config_path,
)
from chatsync.utils.datetime_utils import parse_wire_datetime
from chatsync.utils.load_env import load_env


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "messaging:\n"
        "  current_user_id: ${TEST_CHATSYNC_USER}\n"
        "  transport:\n"
        "    url: ws://$TEST_CHATSYNC_HOST/ws\n"
        "    reconnect_attempts: 5\n"
        "  api:\n"
        "    headers:\n"
        "      - $UNSET_CHATSYNC_VAR\n"
    )
    return str(path)


def test_env_vars_are_substituted(config_file, monkeypatch):
    monkeypatch.setenv("TEST_CHATSYNC_USER", "u1")
    monkeypatch.setenv("TEST_CHATSYNC_HOST", "localhost:5000")
    monkeypatch.delenv("UNSET_CHATSYNC_VAR", raising=False)

    config = load_config(config_file)

    assert config["messaging"]["current_user_id"] == "u1"
    assert config["messaging"]["transport"]["url"] == "ws://localhost:5000/ws"
    assert config["messaging"]["transport"]["reconnect_attempts"] == 5
    # Unknown variables are left as written
    assert config["messaging"]["api"]["headers"] == ["$UNSET_CHATSYNC_VAR"]


def test_config_path_from_environment(config_file, monkeypatch):
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, config_file)
    assert resolve_config_path() == config_file
    assert resolve_config_path("other.yaml") == "other.yaml"
    assert get_component_config("messaging.transport")["reconnect_attempts"] == 5


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_file_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_get_section():
    config = {"messaging": {"transport": {"url": "ws://x"}, "typing": None, "routes": "bad"}}
    assert get_section(config, "messaging.transport") == {"url": "ws://x"}
    assert get_section(config, "messaging.typing") == {}
    assert get_section(config, "messaging.api.headers") == {}
    with pytest.raises(ConfigurationError):
        get_section(config, "messaging.routes")


def test_require_keys_names_every_missing_key():
    with pytest.raises(ConfigurationError) as excinfo:
        require_keys({"url": ""}, ["url", "base_url"], "messaging")
    assert "url" in str(excinfo.value)
    assert "base_url" in str(excinfo.value)
    require_keys({"url": "ws://x"}, ["url"], "messaging.transport")


def test_load_env(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CHATSYNC_TEST_LOADED=yes\n")
    monkeypatch.delenv("CHATSYNC_TEST_LOADED", raising=False)

    assert load_env(str(env_file)) is True
    assert os.environ["CHATSYNC_TEST_LOADED"] == "yes"
    assert load_env(str(tmp_path / "missing.env")) is False
    monkeypatch.delenv("CHATSYNC_TEST_LOADED")


def test_parse_wire_datetime():
    assert parse_wire_datetime("2024-05-01T10:00:00Z").tzinfo is not None
    assert parse_wire_datetime(1714557600000) == parse_wire_datetime(1714557600)
    assert parse_wire_datetime("not a date") is None
    assert parse_wire_datetime(None) is None
