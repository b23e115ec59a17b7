"""
Result shapes for evaluated checks.

Every evaluated check produces one plain dict so reports and callers can
treat passes and failures uniformly:

    {"success": True, "group": ..., "check": ...}
    {"success": False, "group": ..., "check": ..., "error": ...,
     "error_type": ..., "error_code": ..., "expected": ..., "actual": ...}
"""

import traceback
from typing import Any

from pipecheck.commands.errors import PipecheckError

# Context keys lifted from CheckFailure details to the top of a failure
_LIFTED_DETAILS = ("step_name", "field", "expected", "actual")


def passed(group: str, check: str) -> dict[str, Any]:
    """Result for a check that held."""
    return {"success": True, "group": group, "check": check}


def failed(group: str, check: str, error: Exception) -> dict[str, Any]:
    """
    Result for a check that was violated.

    For PipecheckError subclasses the error code and the step, field,
    expected and actual context are copied to the top level.
    """
    result: dict[str, Any] = {
        "success": False,
        "group": group,
        "check": check,
        "error": error.message if isinstance(error, PipecheckError) else str(error),
        "error_type": type(error).__name__,
    }
    if isinstance(error, PipecheckError):
        if error.code:
            result["error_code"] = error.code
        for key in _LIFTED_DETAILS:
            if key in error.details:
                result[key] = error.details[key]
    return result


def format_error(error: Exception, include_traceback: bool = True) -> dict[str, Any]:
    """Format an exception with type, message and, optionally, its traceback.

    Tracebacks expose file paths; leave them out of anything shown to
    people outside the project.
    """
    formatted: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
    }
    if include_traceback:
        formatted["traceback"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    if isinstance(error, PipecheckError):
        if error.code:
            formatted["code"] = error.code
        if error.details:
            formatted["details"] = error.details
    return formatted
