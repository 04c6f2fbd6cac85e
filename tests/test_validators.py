"""
Tests for input validation functions.

Tests cover:
- validate_convert_payload() - every rule, rule order, accumulation
- ensure_valid() - SynthesisRequest on success, ValidationError otherwise
- Non-string values measured by their string form
- Non-object payloads treated as missing text
"""
import pytest

from tts_convert.core.errors import ErrorCode, ValidationError
from tts_convert.services.validators import (
    MAX_TEXT_LENGTH,
    MSG_EMPTY,
    MSG_NOT_STRING,
    MSG_TOO_LONG,
    FieldViolation,
    SynthesisRequest,
    ensure_valid,
    validate_convert_payload,
)


def _msgs(payload):
    return [v.msg for v in validate_convert_payload(payload)]


class TestValidateConvertPayload:
    """Tests for validate_convert_payload()."""

    def test_valid_text(self):
        assert validate_convert_payload({"text": "Hello, world!"}) == []

    def test_valid_unicode_text(self):
        """Length is counted in characters, not bytes."""
        text = "ç" * MAX_TEXT_LENGTH
        assert validate_convert_payload({"text": text}) == []

    def test_whitespace_only_is_valid(self):
        """No trimming: a single space is one character."""
        assert validate_convert_payload({"text": " "}) == []

    def test_boundaries(self):
        assert _msgs({"text": "a"}) == []
        assert _msgs({"text": "a" * 500}) == []
        assert _msgs({"text": "a" * 501}) == [MSG_TOO_LONG]

    def test_empty_string(self):
        assert _msgs({"text": ""}) == [MSG_EMPTY]

    def test_missing_field(self):
        """Both the type rule and the length rule fail, in rule order."""
        assert _msgs({}) == [MSG_NOT_STRING, MSG_EMPTY]

    def test_null_field(self):
        assert _msgs({"text": None}) == [MSG_NOT_STRING, MSG_EMPTY]

    def test_number_field(self):
        assert _msgs({"text": 123}) == [MSG_NOT_STRING]

    def test_false_field(self):
        """false stringifies to "false", which is non-empty."""
        assert _msgs({"text": False}) == [MSG_NOT_STRING]

    def test_long_list_violates_two_rules(self):
        value = ["a" * 600]
        assert _msgs({"text": value}) == [MSG_NOT_STRING, MSG_TOO_LONG]

    def test_non_object_payload(self):
        """A JSON array, a bare string or None carry no text field."""
        for payload in ([], "hello", None, 42):
            assert _msgs(payload) == [MSG_NOT_STRING, MSG_EMPTY]

    def test_violation_carries_received_value(self):
        (violation,) = validate_convert_payload({"text": ""})
        assert violation.value == ""
        assert violation.to_dict() == {
            "type": "field",
            "path": "text",
            "location": "body",
            "msg": MSG_EMPTY,
            "value": "",
        }

    def test_missing_value_omitted_from_dict(self):
        for violation in validate_convert_payload({}):
            assert "value" not in violation.to_dict()


class TestEnsureValid:
    """Tests for ensure_valid()."""

    def test_returns_request(self):
        assert ensure_valid({"text": "hi"}) == SynthesisRequest(text="hi")

    def test_raises_with_all_violations(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid({})
        assert exc_info.value.code == ErrorCode.VALIDATION_FAILED
        assert [v.msg for v in exc_info.value.violations] == [MSG_NOT_STRING, MSG_EMPTY]

    def test_to_response_shape(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid({"text": "a" * 501})
        body = exc_info.value.to_response()
        assert list(body) == ["errors"]
        assert body["errors"][0]["msg"] == MSG_TOO_LONG

    def test_field_violation_is_immutable(self):
        v = FieldViolation(MSG_EMPTY, "")
        with pytest.raises(Exception):
            v.msg = "other"
