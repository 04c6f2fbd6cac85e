"""
Error Codes and Exceptions.

Hierarchy:
    ConvertError
    ├── ValidationError        400, carries every violated rule
    ├── SynthesisError         500, generic message to the client
    │   ├── ProviderError      the speech provider call failed
    │   └── StorageError       writing the artifact failed
    └── DeliveryError          500, the artifact could not be sent

Only ValidationError details ever reach the client. Provider and storage
failures are told apart in logs and metrics but collapse to the same
``{"error": "Error converting text to audio"}`` response.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

# Client-facing messages
CONVERT_FAILED_MESSAGE = "Error converting text to audio"
DELIVERY_FAILED_MESSAGE = "Error generating the audio file"


class ErrorCode:
    """Machine-readable error codes used in logs and ``to_dict()``."""
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PROVIDER_FAILED = "PROVIDER_FAILED"
    CONFIG_INVALID = "CONFIG_INVALID"
    STORAGE_FAILED = "STORAGE_FAILED"
    DELIVERY_FAILED = "DELIVERY_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ConvertError(Exception):
    """
    Base exception for conversion errors.

    Attributes:
        message: Human-readable error message (for logs).
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a log-friendly dict."""
        result: Dict[str, Any] = {
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(ConvertError):
    """
    Raised when the request payload violates the validation rule set.

    Attributes:
        violations: Every violated rule, in rule order.
    """
    def __init__(self, violations: List[Any]):
        self.violations = list(violations)
        messages = "; ".join(v.msg for v in self.violations)
        super().__init__(messages or "Invalid input", ErrorCode.VALIDATION_FAILED)

    def to_response(self) -> Dict[str, Any]:
        """The 400 response body: ``{"errors": [...]}``."""
        return {"errors": [v.to_dict() for v in self.violations]}


class SynthesisError(ConvertError):
    """Raised when turning text into an audio artifact fails."""
    def __init__(self, message: str, code: str = ErrorCode.PROVIDER_FAILED, details: Optional[Dict] = None):
        super().__init__(message, code, details)


class ProviderError(SynthesisError):
    """The external speech provider raised (network, auth, quota, bad response)."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.PROVIDER_FAILED, details)


class StorageError(SynthesisError):
    """The audio bytes could not be written to the artifact directory."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.STORAGE_FAILED, details)


class DeliveryError(ConvertError):
    """The generated artifact could not be streamed back to the client."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.DELIVERY_FAILED, details)
