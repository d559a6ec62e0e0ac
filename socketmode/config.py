"""
Runtime settings for the Socket Mode client.

Precedence, lowest first: built-in defaults, YAML file, environment
variables, explicit overrides from the CLI.

Example socketmode.yaml:

    app_token_env: SLACK_APP_TOKEN
    log_level: DEBUG
    ping_interval: 15
    response:
      block_text: "Working on it"
      button_label: "Click Me."
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from shared.log import get_logger
from socketmode.errors import MissingTokenError, SetupError

logger = get_logger(__name__)

DEFAULT_API_URL = "https://slack.com/api/apps.connections.open"
# Largest inbound frame accepted, 64 MiB
MAX_FRAME_SIZE = 64 * 1024 * 1024
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ResponseSettings:
    text: str = ""
    response_type: str = "ephemeral"
    block_text: str = "hogehoge"
    button_label: str = "Click Me."
    button_value: str = "click-me"
    action_id: str = "button-action"


@dataclass(frozen=True)
class Settings:
    app_token_env: str = "SLACK_APP_TOKEN"
    api_url: str = DEFAULT_API_URL
    log_level: str = "INFO"
    ping_interval: Optional[float] = 15.0
    ping_timeout: Optional[float] = 45.0
    max_size: Optional[int] = MAX_FRAME_SIZE
    response: ResponseSettings = field(default_factory=ResponseSettings)

    def app_token(self) -> str:
        """Read the app-level token, raise MissingTokenError if absent"""
        token = os.getenv(self.app_token_env, "").strip()
        if not token:
            raise MissingTokenError(self.app_token_env)
        return token


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> Settings:
    """
    Build Settings from defaults, optional YAML file, environment and overrides.

    Args:
        config_path: YAML file; falls back to $SOCKETMODE_CONFIG when omitted
        **overrides: top-level Settings fields, None values are ignored

    Also loads a ``.env`` file from the working directory into the environment
    so the token can live there.
    """
    load_dotenv(find_dotenv(usecwd=True))

    settings = Settings()

    path = config_path or _env_path("SOCKETMODE_CONFIG")
    if path is not None:
        settings = _apply_mapping(settings, _read_yaml(path))

    env_values = {
        "api_url": os.getenv("SOCKETMODE_API_URL"),
        "log_level": os.getenv("SOCKETMODE_LOG_LEVEL"),
    }
    settings = replace(settings, **{k: v for k, v in env_values.items() if v})

    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    return replace(settings, log_level=_log_level(settings.log_level))


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value).expanduser() if value else None


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise SetupError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise SetupError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise SetupError(f"Config file {path} must contain a mapping")
    logger.debug(f"Loaded config from {path}")
    return data


def _apply_mapping(settings: Settings, data: Dict[str, Any]) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

    values = {k: v for k, v in data.items() if k in known and k != "response"}
    for key in ("app_token_env", "api_url", "log_level"):
        if key in values and not isinstance(values[key], str):
            raise SetupError(f"'{key}' must be a string, got {values[key]!r}")
    for key in ("ping_interval", "ping_timeout"):
        if key in values:
            values[key] = _seconds(key, values[key])
    if "max_size" in values:
        values["max_size"] = _frame_size(values["max_size"])

    response = data.get("response")
    if response is not None:
        if not isinstance(response, dict):
            raise SetupError("'response' must be a mapping")
        response_known = {f.name for f in fields(ResponseSettings)}
        values["response"] = replace(
            settings.response,
            **{k: str(v) for k, v in response.items() if k in response_known},
        )

    return replace(settings, **values)


def _seconds(key: str, value: Any) -> Optional[float]:
    """null disables the timer, anything else must be a positive number"""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SetupError(f"'{key}' must be a positive number of seconds or null, got {value!r}")
    return float(value)


def _frame_size(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SetupError(f"'max_size' must be a positive number of bytes or null, got {value!r}")
    return value


def _log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise SetupError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level
