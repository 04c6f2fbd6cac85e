"""
Request Context and Logging State.

The request id lives in a ContextVar so that every log line emitted while
a request is handled (including from the threadpool FastAPI runs sync
handlers in) carries the same correlation id.

Environment Variables:
    - TTS_CONVERT_LOG_LEVEL: Override log level (1-4 or name)
    - TTS_CONVERT_LOG_DIR: Enable JSONL file logging into this directory
    - TTS_CONVERT_JSONL_FILE: JSONL filename (default tts-convert.jsonl)
    - TTS_CONVERT_LOG_ROTATE_BYTES: Max log file size before rotation
    - TTS_CONVERT_LOG_ROTATE_BACKUP: Number of rotated files to keep
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" marks log lines emitted outside any request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Return the request id for the current context, or "-"."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    """Current level as "MINIMAL", "NORMAL", "VERBOSE" or "DEBUG"."""
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging configuration from the settings file and environment.

    Priority (highest first):
        1. TTS_CONVERT_LOG_* environment variables
        2. ``logging`` section of the settings YAML
        3. Built-in defaults

    Returns:
        Dictionary with level, log_dir, jsonl_file and rotation options.
    """
    from tts_convert.core.config import ConfigValidationError, load_settings

    cfg: Dict[str, Any] = {}

    try:
        settings = load_settings()
        section = settings.raw.get("logging")
        if isinstance(section, dict):
            cfg.update(section)
    except (OSError, ValueError, yaml.YAMLError, ConfigValidationError) as e:
        # Unreadable settings must not prevent logging from coming up
        cfg["settings_error"] = str(e)

    if os.getenv("TTS_CONVERT_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_CONVERT_LOG_LEVEL"]
    if os.getenv("TTS_CONVERT_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_CONVERT_LOG_DIR"]
    if os.getenv("TTS_CONVERT_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_CONVERT_JSONL_FILE"]
    for env_name, key in (
        ("TTS_CONVERT_LOG_ROTATE_BYTES", "rotate_max_bytes"),
        ("TTS_CONVERT_LOG_ROTATE_BACKUP", "rotate_backup_count"),
    ):
        value = os.getenv(env_name)
        if value and value.isdigit():
            cfg[key] = int(value)

    return cfg
