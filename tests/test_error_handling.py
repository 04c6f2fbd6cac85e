"""
Tests for error codes and the exception hierarchy.

Tests cover:
- ErrorCode constants
- ConvertError.to_dict()
- Subclass relationships (ProviderError/StorageError are SynthesisError)
- ValidationError message joins every rule
- Client-facing messages
"""
from tts_convert.core.errors import (
    CONVERT_FAILED_MESSAGE,
    DELIVERY_FAILED_MESSAGE,
    ConvertError,
    DeliveryError,
    ErrorCode,
    ProviderError,
    StorageError,
    SynthesisError,
    ValidationError,
)
from tts_convert.services.validators import MSG_EMPTY, MSG_NOT_STRING, FieldViolation


class TestErrorCodes:
    """Tests for ErrorCode values."""

    def test_codes(self):
        assert ErrorCode.VALIDATION_FAILED == "VALIDATION_FAILED"
        assert ErrorCode.PROVIDER_FAILED == "PROVIDER_FAILED"
        assert ErrorCode.STORAGE_FAILED == "STORAGE_FAILED"
        assert ErrorCode.DELIVERY_FAILED == "DELIVERY_FAILED"
        assert ErrorCode.CONFIG_INVALID == "CONFIG_INVALID"
        assert ErrorCode.INTERNAL_ERROR == "INTERNAL_ERROR"

    def test_client_messages(self):
        assert CONVERT_FAILED_MESSAGE == "Error converting text to audio"
        assert DELIVERY_FAILED_MESSAGE == "Error generating the audio file"


class TestHierarchy:
    """Tests for exception subclassing and codes."""

    def test_provider_error(self):
        e = ProviderError("boom")
        assert isinstance(e, SynthesisError)
        assert isinstance(e, ConvertError)
        assert e.code == ErrorCode.PROVIDER_FAILED

    def test_storage_error(self):
        e = StorageError("disk full")
        assert isinstance(e, SynthesisError)
        assert e.code == ErrorCode.STORAGE_FAILED

    def test_delivery_error_is_not_synthesis_error(self):
        e = DeliveryError("gone")
        assert not isinstance(e, SynthesisError)
        assert e.code == ErrorCode.DELIVERY_FAILED

    def test_default_code(self):
        assert ConvertError("x").code == ErrorCode.INTERNAL_ERROR


class TestToDict:
    """Tests for ConvertError.to_dict()."""

    def test_without_details(self):
        assert ProviderError("boom").to_dict() == {
            "error": "PROVIDER_FAILED",
            "message": "boom",
        }

    def test_with_details(self):
        d = StorageError("disk full", details={"dir": "/tmp"}).to_dict()
        assert d["details"] == {"dir": "/tmp"}


class TestValidationError:
    """Tests for ValidationError."""

    def test_message_joins_rules(self):
        e = ValidationError([FieldViolation(MSG_NOT_STRING), FieldViolation(MSG_EMPTY)])
        assert e.message == f"{MSG_NOT_STRING}; {MSG_EMPTY}"
        assert len(e.violations) == 2

    def test_to_response(self):
        e = ValidationError([FieldViolation(MSG_EMPTY, "")])
        assert e.to_response() == {
            "errors": [
                {"type": "field", "path": "text", "location": "body", "msg": MSG_EMPTY, "value": ""},
            ]
        }
