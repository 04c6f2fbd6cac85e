"""
Input Validation for the convert endpoint.

The payload is checked against a fixed rule set before any provider work
is done. Every rule is evaluated (no bail-out on the first failure) so the
client receives the complete list of problems in one 400 response.

Validation Rules (applied to the ``text`` field, in order):
    1. Text must be a string
    2. Text must not be empty                 (length >= 1)
    3. Text must not exceed 500 characters    (length <= 500)

Length rules look at the string form of the value, so a missing field or
JSON ``null`` counts as empty and a number such as ``123`` is measured as
``"123"``. A missing field therefore violates rules 1 and 2.

Usage:
    from tts_convert.services.validators import ensure_valid, ValidationError

    try:
        request = ensure_valid(payload)
    except ValidationError as e:
        return JSONResponse(status_code=400, content=e.to_response())
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from tts_convert.core.errors import ValidationError

TEXT_FIELD = "text"
MIN_TEXT_LENGTH = 1
MAX_TEXT_LENGTH = 500

MSG_NOT_STRING = "Text must be a string"
MSG_EMPTY = "Text must not be empty"
MSG_TOO_LONG = f"Text must not exceed {MAX_TEXT_LENGTH} characters"

_MISSING = object()


@dataclass(frozen=True)
class FieldViolation:
    """
    One violated validation rule.

    Attributes:
        msg: The rule's message.
        value: The value that was received (``_MISSING`` when absent).
        path: Field name.
        location: Where the field was read from.
    """
    msg: str
    value: Any = _MISSING
    path: str = TEXT_FIELD
    location: str = "body"

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "type": "field",
            "path": self.path,
            "location": self.location,
            "msg": self.msg,
        }
        if self.value is not _MISSING:
            entry["value"] = self.value
        return entry


@dataclass(frozen=True)
class SynthesisRequest:
    """A validated conversion request: ``1 <= len(text) <= 500``."""
    text: str


def _as_string(value: Any) -> str:
    """String form used by the length rules."""
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def validate_convert_payload(payload: Any) -> List[FieldViolation]:
    """
    Apply the rule set to a decoded JSON body.

    Args:
        payload: Whatever the body decoded to. Anything other than a JSON
            object is treated as an object without ``text``.

    Returns:
        Every violated rule in rule order; empty when the payload is valid.
    """
    value = payload.get(TEXT_FIELD, _MISSING) if isinstance(payload, dict) else _MISSING
    violations: List[FieldViolation] = []

    if not isinstance(value, str):
        violations.append(FieldViolation(MSG_NOT_STRING, value))

    length = len(_as_string(value))
    if length < MIN_TEXT_LENGTH:
        violations.append(FieldViolation(MSG_EMPTY, value))
    if length > MAX_TEXT_LENGTH:
        violations.append(FieldViolation(MSG_TOO_LONG, value))

    return violations


def ensure_valid(payload: Any) -> SynthesisRequest:
    """
    Validate ``payload`` and build the request.

    Raises:
        ValidationError: Carrying all violations, if any rule fails.
    """
    violations = validate_convert_payload(payload)
    if violations:
        raise ValidationError(violations)
    return SynthesisRequest(text=payload[TEXT_FIELD])
