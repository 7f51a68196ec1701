from __future__ import annotations

"""
Error hierarchy for construction, synthesis and query failures.

Every error carries a stable error code so callers (and the CLI) can react
to the failure class without parsing messages.
"""

from typing import Any, Dict, Optional


class ErrorCode:
    """Stable error codes exposed by TfSynthError.to_dict()."""

    # Construction errors
    DUPLICATE_NAME = "DUPLICATE_NAME"
    DUPLICATE_ID = "DUPLICATE_ID"
    INVALID_ID = "INVALID_ID"
    INVALID_PROPERTY = "INVALID_PROPERTY"
    STACK_LOCKED = "STACK_LOCKED"

    # Synthesis errors
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"

    # Query errors
    MALFORMED_DOCUMENT = "MALFORMED_DOCUMENT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class TfSynthError(Exception):
    """
    Base class for all errors raised by the harness.

    Attributes:
        error_code: Stable identifier of the failure class.
        message: Human readable description.
        details: Optional structured context (ids, paths, types).
    """

    error_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for reporting."""
        return {
            "errorCode": self.error_code,
            "message": self.message,
            **self.details,
        }


class DuplicateNameError(TfSynthError):
    """A stack name is already registered in the app."""

    error_code = ErrorCode.DUPLICATE_NAME


class DuplicateIdError(TfSynthError):
    """A construct id is already used under the same parent."""

    error_code = ErrorCode.DUPLICATE_ID


class InvalidIdError(TfSynthError):
    """A stack name, construct id or type tag is empty or malformed."""

    error_code = ErrorCode.INVALID_ID


class InvalidPropertyError(TfSynthError):
    """A property value is not a scalar, list, mapping or reference."""

    error_code = ErrorCode.INVALID_PROPERTY


class StackLockedError(TfSynthError):
    """The stack was already synthesized and no longer accepts changes."""

    error_code = ErrorCode.STACK_LOCKED


class SynthesisError(TfSynthError):
    """The construct tree cannot be turned into a document."""

    error_code = ErrorCode.SYNTHESIS_FAILED


class MalformedDocumentError(TfSynthError):
    """The queried document was not produced by the synthesizer."""

    error_code = ErrorCode.MALFORMED_DOCUMENT
