"""Shared fixtures: offline provider, temporary artifact store, test app."""
from __future__ import annotations

import os

# Must be set before tts_convert.core.logging is imported
os.environ.setdefault("TTS_CONVERT_NO_COLOR", "1")
os.environ.setdefault("TTS_CONVERT_SKIP_WARMUP", "1")

import pytest
from fastapi.testclient import TestClient

from tts_convert.api.dependencies import get_app_config, get_delegate, reset_dependencies
from tts_convert.core.config import AppConfig, StorageConfig
from tts_convert.services.synthesis import SynthesisDelegate
from tts_convert.tts.providers.fake_provider import FakeSpeechProvider
from tts_convert.tts.storage import ArtifactStore


@pytest.fixture(autouse=True)
def _fresh_dependencies():
    """Cached singletons never leak between tests."""
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def fake_provider() -> FakeSpeechProvider:
    return FakeSpeechProvider()


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    return ArtifactStore(str(tmp_path / "temp"))


@pytest.fixture
def make_client(store):
    """Build a TestClient around a given provider (and optional config/store)."""
    from tts_convert.main import create_app

    def _make(provider, config: AppConfig | None = None, artifact_store: ArtifactStore | None = None):
        target = artifact_store or store
        app = create_app()
        delegate = SynthesisDelegate(
            provider=provider,
            store=target,
            model="tts-1-hd",
            voice="alloy",
        )
        app_config = config or AppConfig(storage=StorageConfig(base_dir=str(target.base_dir)))
        app.dependency_overrides[get_delegate] = lambda: delegate
        app.dependency_overrides[get_app_config] = lambda: app_config
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, fake_provider) -> TestClient:
    return make_client(fake_provider)
