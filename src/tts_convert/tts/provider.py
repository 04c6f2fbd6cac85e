"""
Speech Provider Abstraction.

A provider turns text into encoded audio bytes. tts-convert never runs a
speech model itself; it delegates to whichever provider is configured:

    - openai: OpenAI audio.speech API (default)
    - fake: deterministic offline payload for development and tests

Contract:
    synthesize(text, model=..., voice=...) -> bytes

``model`` and ``voice`` are passed on every call rather than baked into
the provider, so one provider instance can serve any fixed pair chosen
by configuration.

Usage:
    from tts_convert.tts.provider import create_provider

    provider = create_provider(config.provider)
    audio = provider.synthesize("Hello", model="tts-1-hd", voice="alloy")
"""
from __future__ import annotations

from tts_convert.core.config import ConfigValidationError, ProviderConfig
from tts_convert.core.logging import get_logger, info

_LOG = get_logger("tts-convert.provider")


class BaseSpeechProvider:
    """
    Abstract base class for speech providers.

    Subclasses implement ``synthesize``. Any exception they raise is
    treated as a provider failure by the synthesis delegate.

    Example:
        class MyProvider(BaseSpeechProvider):
            name = "mine"

            def synthesize(self, text, model, voice):
                return my_api.tts(text, model=model, voice=voice)
    """

    name = "base"

    def synthesize(self, text: str, model: str, voice: str) -> bytes:
        """
        Synthesize speech for ``text``.

        Args:
            text: Validated input text (1-500 characters).
            model: Provider model identifier.
            voice: Provider voice identifier.

        Returns:
            Encoded audio bytes (MP3).
        """
        raise NotImplementedError

    def describe(self) -> dict:
        """Non-secret description used by the health endpoint."""
        return {"name": self.name}


PROVIDER_NAMES = ("openai", "fake")


def create_provider(config: ProviderConfig) -> BaseSpeechProvider:
    """
    Create the provider named in ``config.name``.

    Imports are lazy so that the fake provider works without the openai
    package being importable.

    Raises:
        ConfigValidationError: If the provider name is unknown.
    """
    name = (config.name or "").strip().lower()

    if name == "openai":
        from tts_convert.tts.providers.openai_provider import OpenAISpeechProvider
        provider: BaseSpeechProvider = OpenAISpeechProvider(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout_s=config.timeout_s,
            max_retries=config.max_retries,
            response_format=config.response_format,
        )
    elif name == "fake":
        from tts_convert.tts.providers.fake_provider import FakeSpeechProvider
        provider = FakeSpeechProvider()
    else:
        raise ConfigValidationError(
            f"provider.name must be one of {', '.join(PROVIDER_NAMES)}, got {config.name!r}"
        )

    info(_LOG, "provider_ready", provider=provider.name, model=config.model, voice=config.voice)
    return provider
