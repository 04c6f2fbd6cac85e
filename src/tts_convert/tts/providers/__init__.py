"""
Concrete speech providers.

    - openai_provider.py: OpenAISpeechProvider (OpenAI audio.speech API)
    - fake_provider.py: FakeSpeechProvider (offline, deterministic)

Use tts_convert.tts.provider.create_provider() rather than importing these
directly; it imports only the provider that is configured.
"""
