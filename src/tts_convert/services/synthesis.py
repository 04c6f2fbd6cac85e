"""
SynthesisDelegate - text in, audio artifact out.

Pipeline:
    validated text → provider.synthesize(text, model, voice) → bytes
                   → ArtifactStore.save(bytes) → AudioArtifact

The delegate is built with explicit collaborators (provider, store,
model, voice) instead of reading process-wide state, so tests can hand
it a fake provider and a temporary directory.

Error Handling:
    - Anything the provider raises becomes ProviderError
    - Anything the artifact write raises becomes StorageError
    Both are SynthesisError. There is no retry and no partial result:
    the caller either gets a complete artifact or an exception.

Example:
    >>> delegate = SynthesisDelegate(
    ...     provider=FakeSpeechProvider(),
    ...     store=ArtifactStore("/tmp/tts"),
    ...     model="tts-1-hd",
    ...     voice="alloy",
    ... )
    >>> artifact = delegate.convert("Hello, world!")
    >>> artifact.file_name
    '5f0c...e2.mp3'
"""
from __future__ import annotations

from typing import Optional

from tts_convert.core.errors import ProviderError, StorageError
from tts_convert.core.logging import debug, fail, get_logger, verbose
from tts_convert.core.metrics import metrics
from tts_convert.tts.provider import BaseSpeechProvider
from tts_convert.tts.storage import ArtifactStore, AudioArtifact
from tts_convert.utils.timeit import timeit

_LOG = get_logger("tts-convert.synthesis")


class SynthesisDelegate:
    """
    Turns validated text into one audio artifact on local storage.

    Stateless between calls; safe to share across concurrent requests.
    """

    def __init__(
        self,
        provider: BaseSpeechProvider,
        store: ArtifactStore,
        model: str,
        voice: str,
        text_preview_chars: int = 40,
    ):
        self._provider = provider
        self._store = store
        self._model = model
        self._voice = voice
        self._text_preview_chars = text_preview_chars

    @property
    def provider(self) -> BaseSpeechProvider:
        return self._provider

    @property
    def store(self) -> ArtifactStore:
        return self._store

    @property
    def model(self) -> str:
        return self._model

    @property
    def voice(self) -> str:
        return self._voice

    def _preview(self, text: str) -> Optional[str]:
        if self._text_preview_chars <= 0:
            return None
        return text[:self._text_preview_chars]

    def convert(self, text: str) -> AudioArtifact:
        """
        Synthesize ``text`` and persist the audio.

        Args:
            text: Text already checked by the validation rule set.

        Returns:
            The written AudioArtifact (absolute path, file name, size).

        Raises:
            ProviderError: The provider call failed.
            StorageError: The audio could not be written.
        """
        debug(_LOG, "convert_text", text=text)

        # Stage 1: provider round-trip
        with timeit("provider") as t_provider:
            try:
                audio = bytes(self._provider.synthesize(text, model=self._model, voice=self._voice))
            except Exception as e:
                metrics.record_provider_call("error", t_provider.seconds)
                metrics.record_error("provider")
                fail(_LOG, "provider_failed", provider=self._provider.name,
                     error=f"{type(e).__name__}: {e}", seconds=round(t_provider.seconds, 3),
                     text_preview=self._preview(text))
                raise ProviderError(
                    f"{self._provider.name} synthesis failed: {e}",
                    details={"provider": self._provider.name, "exception": type(e).__name__},
                ) from e

        provider_s = t_provider.timing.seconds if t_provider.timing else -1.0
        metrics.record_provider_call("ok", provider_s)
        verbose(_LOG, "stage", event="provider", seconds=round(provider_s, 4), bytes=len(audio))

        # Stage 2: persist
        with timeit("storage_write") as t_store:
            try:
                artifact = self._store.save(audio)
            except OSError as e:
                metrics.record_error("storage")
                fail(_LOG, "storage_failed", dir=str(self._store.base_dir),
                     error=f"{type(e).__name__}: {e}")
                raise StorageError(
                    f"could not write artifact: {e}",
                    details={"dir": str(self._store.base_dir)},
                ) from e

        if t_store.timing:
            verbose(_LOG, "stage", event="storage_write", seconds=round(t_store.timing.seconds, 4))
        metrics.record_audio_bytes(artifact.size)
        return artifact
