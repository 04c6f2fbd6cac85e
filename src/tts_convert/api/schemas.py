"""
API Request/Response Schemas.

Pydantic models that document the HTTP surface in the OpenAPI schema.
The convert body itself is validated by services.validators (so that
every violated rule is reported with a 400), ConvertRequest only
describes it.

Example Request:
    {"text": "Hello, world!"}

Example 400 Response:
    {
        "errors": [
            {"type": "field", "path": "text", "location": "body",
             "msg": "Text must not be empty", "value": ""}
        ]
    }
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from tts_convert.services.validators import MAX_TEXT_LENGTH


class ConvertRequest(BaseModel):
    """Body of ``POST /api/text-to-speech/convert``."""
    text: str = Field(
        ...,
        min_length=1,
        max_length=MAX_TEXT_LENGTH,
        description=f"Text to synthesize (1-{MAX_TEXT_LENGTH} characters)",
        examples=["Hello, world!"],
    )


class FieldErrorItem(BaseModel):
    """One violated validation rule."""
    type: str = Field("field", description="Error kind, always 'field'")
    path: str = Field(..., description="Offending field name")
    location: str = Field("body", description="Where the field was read from")
    msg: str = Field(..., description="Rule message")
    value: Optional[Any] = Field(None, description="Received value, absent when missing")


class ValidationErrorResponse(BaseModel):
    """400 response body."""
    errors: List[FieldErrorItem]


class ErrorResponse(BaseModel):
    """500 response body when synthesis fails."""
    error: str = Field(..., examples=["Error converting text to audio"])


class HealthResponse(BaseModel):
    """
    ``GET /health`` response.

    Attributes:
        ok: Always true when the process can serve requests.
        provider: Provider description (name and non-secret options).
        model: Fixed synthesis model.
        voice: Fixed synthesis voice.
        storage: Artifact directory usage.
    """
    ok: bool = True
    provider: Dict[str, Any]
    model: str
    voice: str
    storage_dir: str
    storage: Dict[str, int]
