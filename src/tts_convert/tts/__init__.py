"""
Speech provider and artifact storage layer.

    - provider.py: BaseSpeechProvider and create_provider()
    - providers/: OpenAI and fake providers
    - storage.py: ArtifactStore and AudioArtifact
"""
