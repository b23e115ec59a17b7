"""
Structural checks over parsed workflow documents.

Each check either returns quietly or raises CheckFailure naming the step,
the field and the expected vs. actual value. Checks never modify the
documents they inspect.
"""

import logging
from typing import Any, Iterable, Optional, Union

from pipecheck.commands.document import (
    ABSENT,
    JobSpec,
    Mapping,
    Node,
    Scalar,
    Sequence,
    StepSpec,
    TreeView,
    WorkflowDocument,
)
from pipecheck.commands.errors import CheckFailure

logger = logging.getLogger(__name__)

_MISSING = object()

Entity = Union[TreeView, Node]


def find_step_by_name(job: JobSpec, name: str) -> Optional[StepSpec]:
    """Return the first step of the job with the given name, or None."""
    for step in job.steps:
        if step.name == name:
            return step
    return None


def step_index(job: JobSpec, name: str) -> int:
    """Return the position of the named step in the job, or -1 if absent."""
    step = find_step_by_name(job, name)
    return step.index if step is not None else -1


def require_job(document: WorkflowDocument, name: str) -> JobSpec:
    """Return the named job, failing if it is missing or has no step list."""
    job = document.job(name)
    if job is None:
        available = document.jobs.keys() if document.jobs is not None else []
        raise CheckFailure(
            f"Job '{name}' is not defined (jobs: {', '.join(available) or 'none'})",
            field=f"jobs.{name}",
        )
    if not job.has_steps:
        raise CheckFailure(
            f"Job '{name}' must declare 'steps' as a list",
            field=f"jobs.{name}.steps",
        )
    return job


def require_step(job: JobSpec, name: str) -> StepSpec:
    """Return the named step, failing if the job has no such step."""
    step = find_step_by_name(job, name)
    if step is None:
        raise CheckFailure(
            f"Step '{name}' not found in job '{job.name}'",
            step_name=name,
            expected=name,
            actual=[n for n in job.step_names if n is not None],
        )
    return step


def check_step_order(job: JobSpec, name_a: str, name_b: str) -> None:
    """
    Check that step `name_b` is declared after step `name_a`.

    Raises:
        CheckFailure: If either step is missing or `name_b` does not come
            strictly after `name_a`
    """
    index_a = step_index(job, name_a)
    index_b = step_index(job, name_b)
    for name, index in ((name_a, index_a), (name_b, index_b)):
        if index < 0:
            raise CheckFailure(
                f"Step '{name}' not found in job '{job.name}'",
                step_name=name,
            )
    if index_b <= index_a:
        raise CheckFailure(
            f"'{name_b}' should come after '{name_a}' "
            f"(found at index {index_b}, expected after index {index_a})",
            step_name=name_b,
            expected=f"index > {index_a}",
            actual=index_b,
        )
    logger.debug("Order ok: %s (%d) < %s (%d)", name_a, index_a, name_b, index_b)


def check_full_ordering(job: JobSpec, expected_names: list[str]) -> None:
    """
    Check that every expected step exists and that they appear in order.

    Stronger than chaining check_step_order: all missing names are reported
    at once, then each consecutive pair must have strictly increasing
    indices. The first violating pair is reported.
    """
    indices = [step_index(job, name) for name in expected_names]
    missing = [name for name, index in zip(expected_names, indices) if index < 0]
    if missing:
        raise CheckFailure(
            f"Job '{job.name}' is missing steps: {', '.join(missing)}",
            step_name=missing[0],
            expected=list(expected_names),
            actual=[n for n in job.step_names if n is not None],
        )

    for i in range(1, len(expected_names)):
        prev_name, name = expected_names[i - 1], expected_names[i]
        if indices[i] <= indices[i - 1]:
            raise CheckFailure(
                f"'{name}' should come after '{prev_name}'",
                step_name=name,
                expected=list(expected_names),
                actual=[n for n in job.step_names if n is not None],
                details={"pair": [prev_name, name]},
            )


def _label(entity: Entity) -> str:
    if isinstance(entity, StepSpec):
        return f"Step '{entity.describe()}'"
    if isinstance(entity, JobSpec):
        return f"Job '{entity.name}'"
    source = getattr(entity, "source", None)
    return f"Document '{source}'" if source else "Document"


def check_field(
    entity: Entity,
    field_path: str,
    *,
    equals: Any = _MISSING,
    contains: Union[str, Iterable[str], None] = None,
) -> Any:
    """
    Check that a nested field exists and optionally matches a value.

    Args:
        entity: Step, job, document or raw node to inspect
        field_path: Path of the field relative to the entity
        equals: Exact value the field must have (scalars such as runs-on)
        contains: Substring(s) that a string field must all contain

    Returns:
        The field's value as plain Python data

    Raises:
        CheckFailure: If the field is missing or does not match
    """
    label = _label(entity)
    step_name = entity.describe() if isinstance(entity, StepSpec) else None

    node = entity.get(field_path)
    if node is ABSENT or (isinstance(node, Scalar) and node.value is None):
        raise CheckFailure(
            f"{label}: '{field_path}' is required but not provided",
            step_name=step_name,
            field=field_path,
        )
    actual = node.to_python()

    if equals is not _MISSING and not (
        type(actual) is type(equals) and actual == equals
    ):
        raise CheckFailure(
            f"{label}: '{field_path}' expected {equals!r}, got {actual!r}",
            step_name=step_name,
            field=field_path,
            expected=equals,
            actual=actual,
        )

    if contains is not None:
        needles = [contains] if isinstance(contains, str) else list(contains)
        if not isinstance(actual, str):
            raise CheckFailure(
                f"{label}: '{field_path}' must be a string "
                f"(got {type(actual).__name__})",
                step_name=step_name,
                field=field_path,
                expected=needles,
                actual=actual,
            )
        missing = [needle for needle in needles if needle not in actual]
        if missing:
            raise CheckFailure(
                f"{label}: '{field_path}' does not contain "
                f"{', '.join(repr(m) for m in missing)}",
                step_name=step_name,
                field=field_path,
                expected=missing,
                actual=actual,
            )

    return actual


def check_contains(
    collection: Union[Sequence, Mapping, Node, list, dict, None],
    value: Any,
    *,
    label: str = "collection",
) -> None:
    """
    Check that a value is an element of a sequence or a key of a mapping.

    Raises:
        CheckFailure: If the collection is missing or lacks the value
    """
    if collection is None or collection is ABSENT:
        raise CheckFailure(
            f"{label} is missing (expected it to contain {value!r})",
            field=label,
            expected=value,
        )
    if isinstance(collection, Node):
        if not isinstance(collection, (Sequence, Mapping)):
            raise CheckFailure(
                f"{label} must be a list or mapping (got {collection.kind})",
                field=label,
                expected=value,
                actual=collection.to_python(),
            )
        actual = collection.to_python()
    else:
        actual = collection

    present = value in actual
    if not present:
        shown = list(actual) if isinstance(actual, dict) else actual
        raise CheckFailure(
            f"{label} does not contain {value!r} (got {shown!r})",
            field=label,
            expected=value,
            actual=shown,
        )
