"""
Input path resolution.

Paths come from, in order of precedence: an explicit value (CLI option),
an environment variable, then the default relative to the working
directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pipecheck.commands.constants import (
    DEFAULT_JOB,
    DEFAULT_MANIFEST_PATH,
    DEFAULT_WORKFLOW_PATH,
    ENV_PIPECHECK_JOB,
    ENV_PIPECHECK_MANIFEST,
    ENV_PIPECHECK_WORKFLOW,
)


@dataclass(frozen=True)
class CheckConfig:
    workflow_path: Path
    manifest_path: Path
    job: str


def _resolve(explicit: Optional[Union[str, Path]], env_var: str, default: str) -> str:
    if explicit:
        return str(explicit)
    value = os.getenv(env_var)
    if value and value.strip():
        return value.strip()
    return default


def resolve_config(
    workflow: Optional[Union[str, Path]] = None,
    manifest: Optional[Union[str, Path]] = None,
    job: Optional[str] = None,
    base_dir: Optional[Union[str, Path]] = None,
) -> CheckConfig:
    """
    Resolve the workflow path, manifest path and job name.

    Args:
        workflow: Explicit workflow path (takes precedence)
        manifest: Explicit manifest path (takes precedence)
        job: Explicit job name (takes precedence)
        base_dir: Directory relative paths are resolved against
            (defaults to the current working directory)
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    workflow_path = Path(_resolve(workflow, ENV_PIPECHECK_WORKFLOW, DEFAULT_WORKFLOW_PATH))
    manifest_path = Path(_resolve(manifest, ENV_PIPECHECK_MANIFEST, DEFAULT_MANIFEST_PATH))
    return CheckConfig(
        workflow_path=workflow_path if workflow_path.is_absolute() else base / workflow_path,
        manifest_path=manifest_path if manifest_path.is_absolute() else base / manifest_path,
        job=_resolve(job, ENV_PIPECHECK_JOB, DEFAULT_JOB),
    )
