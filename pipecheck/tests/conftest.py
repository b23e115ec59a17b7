"""Pytest configuration for pipecheck tests.

The contract suite checks the workflow and manifest named by
PIPECHECK_WORKFLOW / PIPECHECK_MANIFEST, falling back to the bundled
fixtures. Documents are loaded once per session and shared read-only.
"""

import os
from pathlib import Path

import pytest
import yaml

from pipecheck.commands.checks import require_job
from pipecheck.commands.constants import (
    DEFAULT_JOB,
    ENV_PIPECHECK_JOB,
    ENV_PIPECHECK_MANIFEST,
    ENV_PIPECHECK_WORKFLOW,
)
from pipecheck.commands.loader import (
    load_manifest,
    load_workflow_document,
    normalize_workflow_keys,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FIXTURE_WORKFLOW = FIXTURES_DIR / "ci.yml"
FIXTURE_MANIFEST = FIXTURES_DIR / "package.json"


@pytest.fixture(scope="session")
def workflow_path() -> Path:
    return Path(os.getenv(ENV_PIPECHECK_WORKFLOW) or FIXTURE_WORKFLOW)


@pytest.fixture(scope="session")
def manifest_path() -> Path:
    return Path(os.getenv(ENV_PIPECHECK_MANIFEST) or FIXTURE_MANIFEST)


@pytest.fixture(scope="session")
def job_name() -> str:
    return os.getenv(ENV_PIPECHECK_JOB) or DEFAULT_JOB


@pytest.fixture(scope="session")
def workflow(workflow_path):
    """The workflow under test, loaded once for the whole session."""
    return load_workflow_document(workflow_path)


@pytest.fixture(scope="session")
def manifest(manifest_path):
    """The package manifest under test, loaded once for the whole session."""
    return load_manifest(manifest_path)


@pytest.fixture(scope="session")
def build_job(workflow, job_name):
    return require_job(workflow, job_name)


@pytest.fixture
def workflow_data() -> dict:
    """A private, mutable copy of the bundled fixture workflow."""
    with open(FIXTURE_WORKFLOW, encoding="utf-8") as f:
        data = normalize_workflow_keys(yaml.safe_load(f))
    return data


@pytest.fixture
def write_workflow(tmp_path):
    """Write workflow data to a temporary file and load it back."""

    def _write(data: dict, name: str = "ci.yml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return load_workflow_document(path)

    return _write


@pytest.fixture(scope="session")
def bundled_workflow_path() -> Path:
    return FIXTURE_WORKFLOW


@pytest.fixture(scope="session")
def bundled_manifest_path() -> Path:
    return FIXTURE_MANIFEST


@pytest.fixture(scope="session")
def bundled_workflow():
    """The bundled fixture workflow, regardless of PIPECHECK_WORKFLOW."""
    return load_workflow_document(FIXTURE_WORKFLOW)


@pytest.fixture(scope="session")
def bundled_manifest():
    return load_manifest(FIXTURE_MANIFEST)


@pytest.fixture(scope="session")
def bundled_job(bundled_workflow):
    return require_job(bundled_workflow, DEFAULT_JOB)
