"""
FastAPI REST API Layer for tts-convert.

    - routes.py: /api/text-to-speech/convert, /health, /metrics
    - schemas.py: Pydantic models for the OpenAPI schema
    - dependencies.py: Dependency injection providers
"""
