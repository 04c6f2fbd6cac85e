"""
Fake Speech Provider.

Returns the same small MP3 payload for every request, without network
access. Select it with ``TTS_CONVERT_PROVIDER=fake`` to run the service
locally without an API key.
"""
from __future__ import annotations

from tts_convert.tts.provider import BaseSpeechProvider

# One silent MPEG-1 Layer III frame header followed by padding
FAKE_MP3_BYTES = b"ID3\x03\x00\x00\x00\x00\x00\x00" + b"\xff\xfb\x90\x64" + b"\x00" * 413


class FakeSpeechProvider(BaseSpeechProvider):
    """Deterministic provider for development and tests."""

    name = "fake"

    def __init__(self, payload: bytes = FAKE_MP3_BYTES):
        self.payload = payload
        self.calls: list[tuple[str, str, str]] = []

    def synthesize(self, text: str, model: str, voice: str) -> bytes:
        self.calls.append((text, model, voice))
        return self.payload
