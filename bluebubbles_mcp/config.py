"""
Configuration module for the BlueBubbles MCP server.

Handles path resolution, logging setup, and configuration loading.
Defaults come from config/mcp_server.json under PROJECT_ROOT; connection
details come from the environment:

    BLUEBUBBLES_URL        (required) e.g. http://localhost:1234
    BLUEBUBBLES_PASSWORD   (required) server password
    BLUEBUBBLES_TIMEOUT    request timeout in seconds
    BLUEBUBBLES_CONTACT_TTL  contact cache lifetime in seconds
    BLUEBUBBLES_LOG_LEVEL  DEBUG, INFO, WARNING, ...
    BLUEBUBBLES_LOG_DIR    log directory (defaults to logs/ under PROJECT_ROOT)
    BLUEBUBBLES_CONFIG     alternate JSON defaults file
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

# MCP servers can be started from arbitrary working directories,
# so paths are resolved relative to this file's parent
PROJECT_ROOT = Path(__file__).parent.parent

CONFIG_PATH = PROJECT_ROOT / "config" / "mcp_server.json"
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_CONFIG: Dict[str, Any] = {
    "server_name": "bluebubbles-mcp",
    "version": "1.0.0",
    "request_timeout": 30.0,
    "contact_cache_ttl": 300,
    "contact_refresh_timeout": 30.0,
    "log_level": "INFO",
}

logger = logging.getLogger(__name__)


MISSING_CONNECTION = "BLUEBUBBLES_URL and BLUEBUBBLES_PASSWORD environment variables are required."


class ConfigError(Exception):
    """Required configuration is missing or invalid."""


@dataclass
class Settings:
    """Resolved server settings."""

    bluebubbles_url: str
    bluebubbles_password: str
    server_name: str = DEFAULT_CONFIG["server_name"]
    version: str = DEFAULT_CONFIG["version"]
    request_timeout: float = DEFAULT_CONFIG["request_timeout"]
    contact_cache_ttl: float = DEFAULT_CONFIG["contact_cache_ttl"]
    contact_refresh_timeout: float = DEFAULT_CONFIG["contact_refresh_timeout"]
    log_level: str = DEFAULT_CONFIG["log_level"]
    log_dir: Path = LOG_DIR


def load_config_file(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    """
    Load JSON defaults, falling back to DEFAULT_CONFIG for missing keys.

    Args:
        path: Path to the JSON configuration file

    Returns:
        Merged configuration dict
    """
    config = dict(DEFAULT_CONFIG)
    if path.exists():
        with open(path) as f:
            config.update(json.load(f))
    return config


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return float(default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'")


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from the config file and environment.

    Args:
        env: Environment mapping (defaults to os.environ)
        config_path: JSON defaults file (BLUEBUBBLES_CONFIG, then CONFIG_PATH)

    Raises:
        ConfigError: if BLUEBUBBLES_URL or BLUEBUBBLES_PASSWORD is missing
    """
    env = os.environ if env is None else env
    if config_path is None:
        config_path = Path(env.get("BLUEBUBBLES_CONFIG") or CONFIG_PATH)
    config = load_config_file(config_path)

    url = env.get("BLUEBUBBLES_URL", "").strip()
    password = env.get("BLUEBUBBLES_PASSWORD", "")
    if not url or not password:
        raise ConfigError(MISSING_CONNECTION)

    return Settings(
        bluebubbles_url=url,
        bluebubbles_password=password,
        server_name=config["server_name"],
        version=config["version"],
        request_timeout=_float_env(env, "BLUEBUBBLES_TIMEOUT", config["request_timeout"]),
        contact_cache_ttl=_float_env(env, "BLUEBUBBLES_CONTACT_TTL", config["contact_cache_ttl"]),
        contact_refresh_timeout=float(config["contact_refresh_timeout"]),
        log_level=env.get("BLUEBUBBLES_LOG_LEVEL", config["log_level"]).upper(),
        log_dir=Path(env.get("BLUEBUBBLES_LOG_DIR") or LOG_DIR),
    )


def usage_text(error: str = MISSING_CONNECTION) -> str:
    """Help shown when the server is started without connection details."""
    example = {
        "mcpServers": {
            "bluebubbles": {
                "command": "bluebubbles-mcp",
                "env": {
                    "BLUEBUBBLES_URL": "http://localhost:1234",
                    "BLUEBUBBLES_PASSWORD": "your-password",
                },
            }
        }
    }
    return (
        f"Error: {error}\n"
        "\n"
        "Example:\n"
        "  BLUEBUBBLES_URL=http://localhost:1234 BLUEBUBBLES_PASSWORD=your-password bluebubbles-mcp\n"
        "\n"
        "Or in your MCP client config (e.g. claude_desktop_config.json):\n"
        f"{json.dumps(example, indent=2)}"
    )


def setup_logging(level: str = "INFO", log_dir: Path = LOG_DIR) -> Optional[Path]:
    """
    Log to <log_dir>/mcp_server.log and stderr.

    stdout carries the MCP stdio protocol, so nothing may log there. An
    unwritable log_dir (e.g. a system site-packages install) leaves stderr
    as the only handler.

    Returns:
        The log file path, or None when file logging is unavailable
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file: Optional[Path] = log_dir / 'mcp_server.log'
    file_error = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file))
    except OSError as e:
        log_file, file_error = None, e

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
    # Request URLs carry the server password
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if file_error is not None:
        logger.warning(f"Cannot write logs to {log_dir} ({file_error}); logging to stderr only")
    return log_file
