"""
FastAPI Dependency Injection Providers.

Hierarchy:
    get_settings()       load + cache Settings (YAML + environment)
    get_app_config()     validated AppConfig
    get_artifact_store() ArtifactStore for storage.base_dir
    get_provider()       speech provider named in provider.name
    get_delegate()       SynthesisDelegate wired from all of the above
    read_json_payload()  request body decoded as JSON, or None

All but the last are process-wide singletons (functools.lru_cache).
Tests replace them with ``app.dependency_overrides``:

    app.dependency_overrides[get_delegate] = lambda: SynthesisDelegate(
        provider=FakeSpeechProvider(), store=ArtifactStore(tmp_path),
        model="tts-1-hd", voice="alloy",
    )
"""
from __future__ import annotations

import json
import math
from functools import lru_cache
from typing import Any

from fastapi import Request

from tts_convert.core.config import AppConfig, Settings, load_settings
from tts_convert.services.synthesis import SynthesisDelegate
from tts_convert.tts.provider import BaseSpeechProvider, create_provider
from tts_convert.tts.storage import ArtifactStore


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    Reads ``$TTS_CONVERT_SETTINGS`` (default config/settings.yaml) when it
    exists, then applies environment overrides. Restart to reconfigure.
    """
    return load_settings()


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    return get_settings().get_app_config()


@lru_cache(maxsize=1)
def get_artifact_store() -> ArtifactStore:
    return ArtifactStore(get_app_config().storage.base_dir)


@lru_cache(maxsize=1)
def get_provider() -> BaseSpeechProvider:
    return create_provider(get_app_config().provider)


@lru_cache(maxsize=1)
def get_delegate() -> SynthesisDelegate:
    """
    Get the shared SynthesisDelegate.

    The delegate holds no per-request state, so one instance serves every
    concurrent request.
    """
    config = get_app_config()
    return SynthesisDelegate(
        provider=get_provider(),
        store=get_artifact_store(),
        model=config.provider.model,
        voice=config.provider.voice,
        text_preview_chars=config.logging.text_preview_chars,
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {literal}")
    return value


async def read_json_payload(request: Request) -> Any:
    """
    Decode the request body as strict JSON.

    An empty or malformed body yields None, which the validation rule set
    reports like a missing ``text`` field. NaN, Infinity and numbers that
    overflow a float count as malformed: they could not be echoed back in
    the 400 body.
    """
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError):
        return None


def reset_dependencies() -> None:
    """Drop every cached singleton (tests and config reloads)."""
    for fn in (get_delegate, get_provider, get_artifact_store, get_app_config, get_settings):
        fn.cache_clear()
