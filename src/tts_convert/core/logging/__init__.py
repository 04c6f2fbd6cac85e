"""
tts-convert Structured Logging.

Thin layer over the stdlib ``logging`` module that adds:
    - Numeric verbosity levels (1-4)
    - Colored console output
    - Optional JSONL file output with rotation
    - Request id correlation

Usage:
    from tts_convert.core.logging import get_logger, info, fail

    log = get_logger("tts-convert.mymodule")
    info(log, "request", chars=13)
    fail(log, "provider_failed", error="timeout", seconds=30.0)

Configuration:
    export TTS_CONVERT_LOG_LEVEL=3      # VERBOSE
    export TTS_CONVERT_LOG_DIR=logs     # also write logs/tts-convert.jsonl
    export TTS_CONVERT_NO_COLOR=1
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from .levels import LEVEL_MAP, LEVEL_NAMES, LogLevel, coerce_level
from .context import (
    get_level,
    get_level_name,
    get_log_config,
    get_request_id,
    is_configured,
    read_logging_config,
    set_configured,
    set_level,
    set_log_config,
    set_request_id,
)
from .formatters import ColoredConsoleFormatter, Colors, JsonlFormatter, supports_color

# Read by ColoredConsoleFormatter; tests flip it directly
USE_COLORS = supports_color()

_DEFAULT_JSONL_FILE = "tts-convert.jsonl"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _jsonl_handler(log_config: Dict[str, Any]) -> Optional[logging.Handler]:
    """Rotating JSONL file handler, or None when no log_dir is configured."""
    log_dir = log_config.get("log_dir")
    if not log_dir:
        return None

    target = Path(log_dir)
    target.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        target / str(log_config.get("jsonl_file") or _DEFAULT_JSONL_FILE),
        maxBytes=int(log_config.get("rotate_max_bytes", 10 * 1024 * 1024)),
        backupCount=int(log_config.get("rotate_backup_count", 5)),
        encoding="utf-8",
        delay=True,
    )
    # The file keeps everything; verbosity only filters the console
    handler.setLevel(logging.DEBUG - 10)
    handler.setFormatter(JsonlFormatter())
    return handler


def _adopt_server_loggers(level: LogLevel) -> None:
    """
    Send uvicorn output through our handlers.

    The convert handler already logs one line per request, so uvicorn's
    access log is only kept from VERBOSE upwards.
    """
    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
    access_level = logging.INFO if level >= LogLevel.VERBOSE else logging.WARNING
    logging.getLogger("uvicorn.access").setLevel(access_level)


def configure_logging(level: Optional[int | str | LogLevel] = None, force: bool = False) -> None:
    """
    Install console (and optional JSONL file) handlers on the root logger.

    Args:
        level: Log level (1-4, level name, or LogLevel enum). Defaults to
            TTS_CONVERT_LOG_LEVEL, then ``logging.level`` in settings.
        force: Reconfigure even if logging was already set up.
    """
    global USE_COLORS

    if is_configured() and not force:
        return

    USE_COLORS = supports_color()
    log_config = read_logging_config()
    set_log_config(log_config)

    current_level = coerce_level(level if level is not None else log_config.get("level", LogLevel.NORMAL))
    set_level(current_level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(LEVEL_MAP.get(current_level, logging.INFO))
    console.setFormatter(ColoredConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(logging.DEBUG - 10)
    root.handlers = [console]
    file_handler = _jsonl_handler(log_config)
    if file_handler is not None:
        root.addHandler(file_handler)

    _adopt_server_loggers(current_level)
    set_configured(True)

    if "settings_error" in log_config:
        _log(logging.getLogger("tts-convert.logging"), logging.WARNING, "WARN",
             "settings_unreadable", numeric_level=1, error=log_config["settings_error"])


def _log(
    logger: logging.Logger,
    level: int,
    tag: str,
    msg: str,
    numeric_level: int = 2,
    exc_info: Any = None,
    **fields: Any
) -> None:
    """
    Emit one structured record if ``numeric_level`` is enabled.

    ``event`` and ``seconds`` get their own record attributes (the
    formatters color them); every other keyword lands in ``extra_data``.
    """
    if numeric_level > get_level():
        return

    structured = {
        "tag": tag,
        "numeric_level": numeric_level,
        "request_id": get_request_id(),
        "event": fields.pop("event", None),
        "seconds": fields.pop("seconds", None),
    }
    structured["extra_data"] = fields or None
    logger.log(level, msg, exc_info=exc_info, extra=structured)


def get_logger(name: str = "tts-convert") -> logging.Logger:
    """Return a ``tts-convert.*`` logger; first use configures logging."""
    configure_logging()
    return logging.getLogger(name)


# Helpers. The second argument is the event name, keywords become key=value
# fields: info(log, "request", chars=13)

def info(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Request lifecycle and startup lines (NORMAL)."""
    _log(logger, logging.INFO, "INFO", msg, numeric_level=2, **fields)


def warn(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Rejected input and recoverable problems (NORMAL)."""
    _log(logger, logging.WARNING, "WARN", msg, numeric_level=2, **fields)


def error(logger: logging.Logger, msg: str, exc_info: Any = None, **fields: Any) -> None:
    """Request-level failure that produced a 500 (MINIMAL)."""
    _log(logger, logging.ERROR, "ERROR", msg, numeric_level=1, exc_info=exc_info, **fields)


def success(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """A conversion that produced an artifact (NORMAL)."""
    _log(logger, logging.INFO, "SUCCESS", msg, numeric_level=2, **fields)


def fail(logger: logging.Logger, msg: str, exc_info: Any = None, **fields: Any) -> None:
    """Provider, storage or send failure with its cause (MINIMAL)."""
    _log(logger, logging.ERROR, "FAIL", msg, numeric_level=1, exc_info=exc_info, **fields)


def verbose(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Per-stage timings and artifact bookkeeping (VERBOSE)."""
    _log(logger, logging.DEBUG, "INFO", msg, numeric_level=3, **fields)


def debug(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Full request text and provider request details (DEBUG)."""
    _log(logger, logging.DEBUG - 5, "DEBUG", msg, numeric_level=4, **fields)


__all__ = [
    # levels
    "LogLevel", "LEVEL_MAP", "LEVEL_NAMES", "coerce_level",
    # formatting
    "Colors", "supports_color", "JsonlFormatter", "ColoredConsoleFormatter",
    # context
    "get_request_id", "set_request_id", "get_level", "get_level_name", "get_log_config",
    # setup and helpers
    "configure_logging", "get_logger",
    "info", "warn", "error", "success", "fail", "verbose", "debug",
]
