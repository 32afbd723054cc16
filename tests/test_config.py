"""Tests for settings loading and logging setup."""

import json
import logging

import pytest

from bluebubbles_mcp.config import (
    DEFAULT_CONFIG,
    LOG_DIR,
    ConfigError,
    load_config_file,
    load_settings,
    setup_logging,
    usage_text,
)

ENV = {"BLUEBUBBLES_URL": "http://localhost:1234", "BLUEBUBBLES_PASSWORD": "pw"}


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "mcp_server.json"
    path.write_text(json.dumps({"server_name": "bb-test", "contact_cache_ttl": 60}))
    return path


def test_missing_file_uses_defaults(tmp_path):
    assert load_config_file(tmp_path / "absent.json") == DEFAULT_CONFIG


def test_file_overrides_defaults(config_file):
    config = load_config_file(config_file)

    assert config["server_name"] == "bb-test"
    assert config["contact_cache_ttl"] == 60
    assert config["request_timeout"] == DEFAULT_CONFIG["request_timeout"]


def test_settings_from_env(config_file):
    settings = load_settings(ENV, config_file)

    assert settings.bluebubbles_url == "http://localhost:1234"
    assert settings.bluebubbles_password == "pw"
    assert settings.server_name == "bb-test"
    assert settings.contact_cache_ttl == 60.0
    assert settings.log_level == "INFO"


def test_env_overrides_file(config_file):
    env = dict(ENV, BLUEBUBBLES_TIMEOUT="5", BLUEBUBBLES_CONTACT_TTL="10", BLUEBUBBLES_LOG_LEVEL="debug")

    settings = load_settings(env, config_file)

    assert settings.request_timeout == 5.0
    assert settings.contact_cache_ttl == 10.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("missing", ["BLUEBUBBLES_URL", "BLUEBUBBLES_PASSWORD"])
def test_connection_details_required(missing, config_file):
    env = {k: v for k, v in ENV.items() if k != missing}

    with pytest.raises(ConfigError):
        load_settings(env, config_file)


def test_bad_number(config_file):
    with pytest.raises(ConfigError, match="BLUEBUBBLES_TIMEOUT"):
        load_settings(dict(ENV, BLUEBUBBLES_TIMEOUT="soon"), config_file)


def test_usage_text_has_client_snippet():
    text = usage_text()

    assert text.startswith("Error: BLUEBUBBLES_URL and BLUEBUBBLES_PASSWORD")
    assert '"mcpServers"' in text
    assert "BLUEBUBBLES_PASSWORD" in text


def test_setup_logging_quiets_http_loggers(tmp_path):
    root = logging.getLogger()
    saved, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        log_file = setup_logging("INFO", tmp_path / "logs")

        assert log_file == tmp_path / "logs" / "mcp_server.log"
        assert log_file.parent.is_dir()
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved
        root.setLevel(saved_level)


def test_log_dir_and_config_from_env(tmp_path, config_file):
    env = dict(ENV, BLUEBUBBLES_LOG_DIR=str(tmp_path / "bb-logs"), BLUEBUBBLES_CONFIG=str(config_file))

    settings = load_settings(env)

    assert settings.log_dir == tmp_path / "bb-logs"
    assert settings.server_name == "bb-test"


def test_log_dir_defaults_beside_package(config_file):
    assert load_settings(ENV, config_file).log_dir == LOG_DIR


def test_unwritable_log_dir_falls_back_to_stderr(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    root = logging.getLogger()
    saved, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        log_file = setup_logging("INFO", blocker / "logs")

        assert log_file is None
        assert [type(h) for h in root.handlers] == [logging.StreamHandler]
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved
        root.setLevel(saved_level)
