"""
Typed error classes for pipecheck.

This module provides the error hierarchy used by loaders and checks:
- PipecheckError: Base exception for all pipecheck errors
- SetupError: Input files missing or unreadable (aborts the whole run)
- ParseError: Input files that are not valid YAML/JSON mappings
- ValidationError: Invalid arguments passed to the document accessors
- CheckFailure: A single workflow expectation that was violated
"""

from typing import Any, Optional


class PipecheckError(Exception):
    """Root of everything pipecheck raises about a workflow or manifest.

    The message is what the report table shows. The code (SETUP_FAILED,
    PARSE_ERROR, CHECK_FAILED, ...) tells a loading problem from a broken
    expectation, and details hold the offending file, step, field and the
    expected vs. actual values.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = dict(details) if details else {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form, as embedded in check results."""
        payload: dict[str, Any] = {"type": type(self).__name__, "message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}" if self.code else self.message


class SetupError(PipecheckError):
    """Raised when an input document cannot be loaded.

    Raised when:
    - The workflow or manifest file does not exist
    - The file cannot be read

    A setup error is fatal for the whole run: no check is evaluated.
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.config_file = config_file
        details = dict(details) if details else {}
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, code=code or "SETUP_FAILED", details=details)


class ParseError(SetupError):
    """Raised when a document is not valid UTF-8, not valid YAML/JSON, or
    cannot be turned into a finite tree."""

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message, config_file=config_file, code="PARSE_ERROR", details=details
        )


class ValidationError(PipecheckError, ValueError):
    """Input validation errors.

    Raised when an accessor receives a malformed path expression.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.field = field
        self.value = value
        details = dict(details) if details else {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, code=code or "VALIDATION_FAILED", details=details)


class CheckFailure(PipecheckError, AssertionError):
    """Raised when a workflow expectation is violated.

    Also an AssertionError so test runners report it as a failed
    assertion rather than an error.
    """

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        field: Optional[str] = None,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.step_name = step_name
        self.field = field
        self.expected = expected
        self.actual = actual
        details = dict(details) if details else {}
        if step_name:
            details["step_name"] = step_name
        if field:
            details["field"] = field
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual
        super().__init__(message, code="CHECK_FAILED", details=details)


__all__ = [
    "PipecheckError",
    "SetupError",
    "ParseError",
    "ValidationError",
    "CheckFailure",
]
