"""
Commands module - CLI commands and the workflow validation library.
"""

from pipecheck.commands.battery import CHECKS, run_battery, summarize
from pipecheck.commands.check import check, steps
from pipecheck.commands.checks import (
    check_contains,
    check_field,
    check_full_ordering,
    check_step_order,
    find_step_by_name,
    step_index,
)
from pipecheck.commands.errors import (
    CheckFailure,
    ParseError,
    PipecheckError,
    SetupError,
    ValidationError,
)
from pipecheck.commands.loader import load_manifest, load_workflow_document

__all__ = [
    # Commands
    "check",
    "steps",
    # Loading
    "load_workflow_document",
    "load_manifest",
    # Checks
    "find_step_by_name",
    "step_index",
    "check_step_order",
    "check_field",
    "check_contains",
    "check_full_ordering",
    "CHECKS",
    "run_battery",
    "summarize",
    # Error classes
    "PipecheckError",
    "SetupError",
    "ParseError",
    "ValidationError",
    "CheckFailure",
]
