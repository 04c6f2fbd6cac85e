"""
OpenAI Speech Provider.

Wraps ``client.audio.speech.create`` from the official ``openai`` SDK.

Notes:
    - The credential comes from configuration (OPENAI_API_KEY), never from
      the request.
    - The SDK retries twice by default; tts-convert passes
      ``max_retries=0`` unless configured otherwise so a failed request
      fails once.
    - ``timeout_s=None`` keeps the SDK default (wait for the provider).
"""
from __future__ import annotations

from typing import Any, Optional

from openai import OpenAI

from tts_convert.core.logging import debug, get_logger
from tts_convert.tts.provider import BaseSpeechProvider

_LOG = get_logger("tts-convert.provider.openai")


class OpenAISpeechProvider(BaseSpeechProvider):
    """Text-to-speech through the OpenAI API."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_retries: int = 0,
        response_format: str = "mp3",
        client: Optional[OpenAI] = None,
    ):
        """
        Args:
            api_key: OpenAI API key. Falls back to the SDK's own env lookup.
            base_url: Alternative API base (OpenAI-compatible servers).
            timeout_s: Per-request timeout in seconds, None for SDK default.
            max_retries: SDK-level retries.
            response_format: Audio encoding requested from the API.
            client: Pre-built client (tests inject a mock here).
        """
        self.response_format = response_format
        self.timeout_s = timeout_s
        self._client_kwargs: dict[str, Any] = {"max_retries": max_retries}
        if api_key:
            self._client_kwargs["api_key"] = api_key
        if base_url:
            self._client_kwargs["base_url"] = base_url
        if timeout_s is not None:
            self._client_kwargs["timeout"] = timeout_s
        self._client = client

    @property
    def client(self) -> OpenAI:
        """
        The SDK client, built on first use.

        Building it lazily means a missing API key surfaces as a failed
        conversion (logged, generic 500) instead of a failed startup.
        """
        if self._client is None:
            self._client = OpenAI(**self._client_kwargs)
        return self._client

    def synthesize(self, text: str, model: str, voice: str) -> bytes:
        debug(_LOG, "openai_speech_request", model=model, voice=voice, chars=len(text))
        response = self.client.audio.speech.create(
            model=model,
            voice=voice,
            input=text,
            response_format=self.response_format,
        )
        return response.content

    def describe(self) -> dict:
        return {
            "name": self.name,
            "response_format": self.response_format,
            "timeout_s": self.timeout_s,
        }
