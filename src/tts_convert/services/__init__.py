"""
tts-convert Services Layer.

Business logic between the HTTP routes and the provider/storage layer.

Components:
    - validators.py: Validation rule set for the ``text`` field
    - synthesis.py: SynthesisDelegate (provider call + artifact write)
"""
from .synthesis import SynthesisDelegate
from .validators import (
    MAX_TEXT_LENGTH,
    FieldViolation,
    SynthesisRequest,
    ensure_valid,
    validate_convert_payload,
)

__all__ = [
    "SynthesisDelegate",
    "SynthesisRequest",
    "FieldViolation",
    "MAX_TEXT_LENGTH",
    "ensure_valid",
    "validate_convert_payload",
]
