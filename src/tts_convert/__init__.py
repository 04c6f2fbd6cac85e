"""
tts-convert: Text-to-Speech conversion microservice.

Accepts text over HTTP, has an external speech provider synthesize it
and returns the audio as an MP3 download.

Key Features:
    - Single endpoint: POST /api/text-to-speech/convert
    - Validation that reports every violated rule in one 400 response
    - Pluggable speech provider (OpenAI by default, offline fake for dev)
    - Uniquely named artifacts, opt-in cleanup
    - Structured logging with request ids, Prometheus metrics

Example Usage:
    >>> from tts_convert.services import SynthesisDelegate
    >>> from tts_convert.tts.providers.fake_provider import FakeSpeechProvider
    >>> from tts_convert.tts.storage import ArtifactStore
    >>>
    >>> delegate = SynthesisDelegate(FakeSpeechProvider(), ArtifactStore("temp"),
    ...                              model="tts-1-hd", voice="alloy")
    >>> artifact = delegate.convert("Hello, world!")
    >>> artifact.file_name.endswith(".mp3")
    True
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
