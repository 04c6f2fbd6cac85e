"""
Configuration Management for tts-convert.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (OPENAI_API_KEY, PORT, TTS_CONVERT_*)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    provider:
      name: openai
      model: tts-1-hd
      voice: alloy
      timeout_s: 60

    storage:
      base_dir: ./temp
      delete_after_send: false

    server:
      port: 3000
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import math
import os
import yaml


class ConfigValidationError(Exception):
    """
    Raised when configuration validation fails.

    This exception is thrown when a configuration value is outside
    acceptable bounds or of the wrong type.
    """
    pass


class Defaults:
    """
    Centralized default configuration values.

    Every default lives here so the YAML loader, the CLI and the tests
    agree on what an unconfigured service looks like.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Speech Provider
    # ─────────────────────────────────────────────────────────────────────────
    PROVIDER_NAME = "openai"            # openai | fake
    PROVIDER_MODEL = "tts-1-hd"         # Fixed model, never taken from the request
    PROVIDER_VOICE = "alloy"            # Fixed voice, never taken from the request
    PROVIDER_RESPONSE_FORMAT = "mp3"
    PROVIDER_TIMEOUT_S = None           # None = wait until the provider answers
    PROVIDER_MAX_RETRIES = 0            # The service never retries

    # ─────────────────────────────────────────────────────────────────────────
    # Artifact Storage
    # ─────────────────────────────────────────────────────────────────────────
    STORAGE_BASE_DIR = "./temp"
    STORAGE_DELETE_AFTER_SEND = False   # Opt-in; artifacts are kept otherwise

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_HOST = "0.0.0.0"
    SERVER_PORT = 3000

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 40     # Characters of input text shown in logs
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG

    SETTINGS_PATH = "config/settings.yaml"


@dataclass
class ProviderConfig:
    """
    Speech synthesis provider configuration.

    ``model`` and ``voice`` are service-wide constants: clients only ever
    send text.
    """
    name: str = Defaults.PROVIDER_NAME
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = Defaults.PROVIDER_MODEL
    voice: str = Defaults.PROVIDER_VOICE
    response_format: str = Defaults.PROVIDER_RESPONSE_FORMAT
    timeout_s: Optional[float] = Defaults.PROVIDER_TIMEOUT_S
    max_retries: int = Defaults.PROVIDER_MAX_RETRIES


@dataclass
class StorageConfig:
    """Where generated audio artifacts are written."""
    base_dir: str = Defaults.STORAGE_BASE_DIR
    delete_after_send: bool = Defaults.STORAGE_DELETE_AFTER_SEND


@dataclass
class ServerConfig:
    """Listen address for ``tts-convert --serve``."""
    host: str = Defaults.SERVER_HOST
    port: int = Defaults.SERVER_PORT


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, errors only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Per-stage timing
        4 = DEBUG: Full request text and internal state
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class AppConfig:
    """
    Validated configuration for the whole service.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = AppConfig.from_settings(settings)
        print(config.provider.model)
    """
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AppConfig":
        """
        Create AppConfig from Settings with validation.

        Args:
            settings: Raw Settings object loaded from YAML.

        Returns:
            Validated AppConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw
        number = cls._coerce_number

        # ─────────────────────────────────────────────────────────────────────
        # Provider configuration
        # ─────────────────────────────────────────────────────────────────────
        provider_raw = _section(raw, "provider")
        timeout_raw = provider_raw.get("timeout_s", Defaults.PROVIDER_TIMEOUT_S)
        provider = ProviderConfig(
            name=str(provider_raw.get("name", Defaults.PROVIDER_NAME)).lower(),
            api_key=provider_raw.get("api_key") or None,
            base_url=provider_raw.get("base_url") or None,
            model=str(provider_raw.get("model", Defaults.PROVIDER_MODEL)),
            voice=str(provider_raw.get("voice", Defaults.PROVIDER_VOICE)),
            response_format=str(provider_raw.get("response_format", Defaults.PROVIDER_RESPONSE_FORMAT)),
            timeout_s=number("provider.timeout_s", timeout_raw, float) if timeout_raw is not None else None,
            max_retries=number("provider.max_retries", provider_raw.get("max_retries", Defaults.PROVIDER_MAX_RETRIES), int),
        )
        cls._validate_not_empty("provider.model", provider.model)
        cls._validate_not_empty("provider.voice", provider.voice)
        if provider.timeout_s is not None:
            cls._validate_positive("provider.timeout_s", provider.timeout_s)
        cls._validate_non_negative("provider.max_retries", provider.max_retries)

        # ─────────────────────────────────────────────────────────────────────
        # Storage configuration
        # ─────────────────────────────────────────────────────────────────────
        storage_raw = _section(raw, "storage")
        storage = StorageConfig(
            base_dir=str(storage_raw.get("base_dir", Defaults.STORAGE_BASE_DIR)),
            delete_after_send=_as_bool(storage_raw.get("delete_after_send", Defaults.STORAGE_DELETE_AFTER_SEND)),
        )
        cls._validate_not_empty("storage.base_dir", storage.base_dir)

        # ─────────────────────────────────────────────────────────────────────
        # Server configuration
        # ─────────────────────────────────────────────────────────────────────
        server_raw = _section(raw, "server")
        server = ServerConfig(
            host=str(server_raw.get("host", Defaults.SERVER_HOST)),
            port=number("server.port", server_raw.get("port", Defaults.SERVER_PORT), int),
        )
        cls._validate_range("server.port", server.port, 1, 65535)

        # ─────────────────────────────────────────────────────────────────────
        # Logging configuration
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = _section(raw, "logging")
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = number("logging.level", log_level_raw, int)

        logging_cfg = LoggingConfig(
            text_preview_chars=number(
                "logging.text_preview_chars",
                logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS),
                int,
            ),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            provider=provider,
            storage=storage,
            server=server,
            logging=logging_cfg,
        )

    @staticmethod
    def _coerce_number(name: str, value: Any, kind: type) -> Any:
        """Convert a YAML or environment value to int/float, or raise ConfigValidationError."""
        try:
            result = kind(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{name} must be a number, got {value!r}") from None
        if kind is float and not math.isfinite(result):
            raise ConfigValidationError(f"{name} must be finite, got {value!r}")
        return result

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")

    @staticmethod
    def _validate_not_empty(name: str, value: str) -> None:
        if not value.strip():
            raise ConfigValidationError(f"{name} must not be empty")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_app_config() to get the validated AppConfig.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    def get_app_config(self) -> AppConfig:
        """
        Get validated AppConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return AppConfig.from_settings(self)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Return one top-level settings section as a dict.

    A key with no body (``provider:`` on its own line) loads as None and
    counts as an empty section.
    """
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigValidationError(f"{name} must be a mapping, got {type(value).__name__}")
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay process environment onto the raw settings dict (in place)."""
    provider = raw["provider"] = _section(raw, "provider")
    storage = raw["storage"] = _section(raw, "storage")
    server = raw["server"] = _section(raw, "server")

    if os.getenv("OPENAI_API_KEY"):
        provider["api_key"] = os.environ["OPENAI_API_KEY"]
    if os.getenv("OPENAI_BASE_URL"):
        provider["base_url"] = os.environ["OPENAI_BASE_URL"]
    if os.getenv("TTS_CONVERT_PROVIDER"):
        provider["name"] = os.environ["TTS_CONVERT_PROVIDER"]
    if os.getenv("TTS_CONVERT_TIMEOUT_S"):
        provider["timeout_s"] = os.environ["TTS_CONVERT_TIMEOUT_S"]
    if os.getenv("TTS_CONVERT_STORAGE_DIR"):
        storage["base_dir"] = os.environ["TTS_CONVERT_STORAGE_DIR"]
    if os.getenv("HOST"):
        server["host"] = os.environ["HOST"]
    if os.getenv("PORT"):
        server["port"] = os.environ["PORT"]
    return raw


def load_settings(path: Optional[str] = None, required: bool = False) -> Settings:
    """
    Load settings from a YAML configuration file.

    The path defaults to ``$TTS_CONVERT_SETTINGS`` or
    ``config/settings.yaml``. Environment overrides are applied on top
    of whatever the file contains.

    Args:
        path: Path to the YAML configuration file.
        required: Raise if the file is missing instead of using defaults.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If ``required`` and the settings file doesn't exist.
        ConfigValidationError: If the file's top level is not a mapping.
    """
    p = Path(path or os.getenv("TTS_CONVERT_SETTINGS", Defaults.SETTINGS_PATH))
    raw: Dict[str, Any] = {}

    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigValidationError(f"{p}: top level must be a mapping, got {type(raw).__name__}")
    elif required:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    return Settings(raw=_apply_env_overrides(raw))
