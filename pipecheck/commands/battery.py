"""
The CI workflow contract.

This module lists every expectation placed on the build pipeline and the
companion manifest, grouped the way they are reported:
- Node.js setup
- Dependency installation
- Unit test execution
- Application build
- JFrog Artifactory publishing
- Workflow triggers
- Job configuration

Each check is evaluated independently; one failing check never stops the
others.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pipecheck.commands.checks import (
    check_contains,
    check_field,
    check_full_ordering,
    check_step_order,
    require_job,
    require_step,
)
from pipecheck.commands.constants import (
    ARTIFACTORY_ENV_VARS,
    BUILD_COMMAND,
    DEFAULT_JOB,
    EXPECTED_BRANCH,
    EXPECTED_RUNNER,
    EXPECTED_STEPS,
    INSTALL_COMMAND,
    MANIFEST_BUILD_SCRIPTS,
    MANIFEST_TEST_SCRIPT,
    NODE_VERSION,
    PUBLISH_LOCAL_ARTIFACT,
    PUBLISH_METHOD,
    PUBLISH_REMOTE_ARTIFACT,
    SETUP_NODE_ACTION,
    STEP_BUILD,
    STEP_CHECKOUT,
    STEP_INSTALL,
    STEP_PUBLISH,
    STEP_SETUP_NODE,
    STEP_TEST,
    TEST_COMMAND,
)
from pipecheck.commands.document import ManifestDocument, WorkflowDocument
from pipecheck.commands.errors import CheckFailure
from pipecheck.commands.result import failed, passed

logger = logging.getLogger(__name__)

GROUP_NODE = "Node.js version setup"
GROUP_INSTALL = "Dependency installation"
GROUP_TESTS = "Unit test execution"
GROUP_BUILD = "Application build"
GROUP_PUBLISH = "JFrog Artifactory publishing"
GROUP_TRIGGERS = "Workflow triggers"
GROUP_JOB = "Job configuration"


@dataclass(frozen=True)
class Documents:
    """The inputs a check runs against."""

    workflow: WorkflowDocument
    manifest: Optional[ManifestDocument] = None
    job: str = DEFAULT_JOB


@dataclass(frozen=True)
class Check:
    group: str
    name: str
    func: Callable[[Documents], None]
    needs_manifest: bool = False


def _require_manifest(docs: Documents) -> ManifestDocument:
    if docs.manifest is None:
        raise CheckFailure("Manifest document was not loaded", field="manifest")
    return docs.manifest


# =========================================================================
# Node.js setup
# =========================================================================


def node_version_is_set_up(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_SETUP_NODE)
    check_field(step, "uses", equals=SETUP_NODE_ACTION)
    check_field(step, "with")
    check_field(step, "with['node-version']", equals=NODE_VERSION)


def setup_node_follows_checkout(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_step_order(job, STEP_CHECKOUT, STEP_SETUP_NODE)


# =========================================================================
# Dependency installation
# =========================================================================


def dependencies_are_installed(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_INSTALL)
    check_field(step, "run", contains=INSTALL_COMMAND)


def install_follows_setup_node(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_step_order(job, STEP_SETUP_NODE, STEP_INSTALL)


def manifest_declares_dependencies(docs: Documents) -> None:
    manifest = _require_manifest(docs)
    dependencies = manifest.dependencies
    if dependencies is None:
        raise CheckFailure(
            "Manifest must declare 'dependencies' as a mapping",
            field="dependencies",
            actual=manifest.get("dependencies").to_python(),
        )
    if len(dependencies) == 0:
        raise CheckFailure(
            "Manifest 'dependencies' must not be empty",
            field="dependencies",
            expected="at least one dependency",
            actual={},
        )


# =========================================================================
# Unit tests
# =========================================================================


def tests_are_run(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_TEST)
    check_field(step, "run", contains=TEST_COMMAND)


def tests_follow_install(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_step_order(job, STEP_INSTALL, STEP_TEST)


def _check_script(manifest: ManifestDocument, name: str) -> None:
    value = manifest.script(name)
    if value is None:
        raise CheckFailure(
            f"Manifest script '{name}' must be defined as a string",
            field=f"scripts['{name}']",
            actual=manifest.get(f"scripts['{name}']").to_python(),
        )
    if not value.strip():
        raise CheckFailure(
            f"Manifest script '{name}' cannot be empty",
            field=f"scripts['{name}']",
            actual=value,
        )


def manifest_defines_test_script(docs: Documents) -> None:
    _check_script(_require_manifest(docs), MANIFEST_TEST_SCRIPT)


# =========================================================================
# Build
# =========================================================================


def app_is_built(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_BUILD)
    check_field(step, "run", contains=BUILD_COMMAND)


def build_follows_tests(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_step_order(job, STEP_TEST, STEP_BUILD)


def manifest_defines_build_scripts(docs: Documents) -> None:
    manifest = _require_manifest(docs)
    for name in MANIFEST_BUILD_SCRIPTS:
        _check_script(manifest, name)


# =========================================================================
# Artifactory publishing
# =========================================================================


def app_is_published(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_PUBLISH)
    check_field(step, "run", contains=["curl", *ARTIFACTORY_ENV_VARS])


def publish_follows_build(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_step_order(job, STEP_BUILD, STEP_PUBLISH)


def publish_env_is_configured(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_PUBLISH)
    check_field(step, "env")
    for var in ARTIFACTORY_ENV_VARS:
        check_contains(step.get("env"), var, label=f"Step '{STEP_PUBLISH}' env")
        check_field(step, f"env['{var}']")


def publish_uses_put(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_PUBLISH)
    check_field(step, "run", contains=PUBLISH_METHOD)


def publish_references_artifact(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    step = require_step(job, STEP_PUBLISH)
    check_field(
        step, "run", contains=[PUBLISH_LOCAL_ARTIFACT, PUBLISH_REMOTE_ARTIFACT]
    )


# =========================================================================
# Triggers and job configuration
# =========================================================================


def _check_trigger(docs: Documents, event: str) -> None:
    triggers = docs.workflow.triggers
    if triggers is None:
        raise CheckFailure("Workflow must declare 'on' triggers", field="on")
    check_contains(triggers, event, label="Workflow triggers")
    check_contains(
        docs.workflow.branches(event),
        EXPECTED_BRANCH,
        label=f"on.{event}.branches",
    )


def triggered_on_push(docs: Documents) -> None:
    _check_trigger(docs, "push")


def triggered_on_pull_request(docs: Documents) -> None:
    _check_trigger(docs, "pull_request")


def job_runs_on_expected_runner(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_field(job, "runs-on", equals=EXPECTED_RUNNER)


def steps_are_in_order(docs: Documents) -> None:
    job = require_job(docs.workflow, docs.job)
    check_full_ordering(job, EXPECTED_STEPS)


CHECKS: list[Check] = [
    Check(GROUP_NODE, "Node.js 20 is set up", node_version_is_set_up),
    Check(GROUP_NODE, "Setup comes after checkout", setup_node_follows_checkout),
    Check(GROUP_INSTALL, "Dependencies are installed", dependencies_are_installed),
    Check(GROUP_INSTALL, "Install comes after Node.js setup", install_follows_setup_node),
    Check(
        GROUP_INSTALL,
        "Manifest declares dependencies",
        manifest_declares_dependencies,
        needs_manifest=True,
    ),
    Check(GROUP_TESTS, "Unit tests run with npm test", tests_are_run),
    Check(GROUP_TESTS, "Tests run after install", tests_follow_install),
    Check(
        GROUP_TESTS,
        "Manifest defines a test script",
        manifest_defines_test_script,
        needs_manifest=True,
    ),
    Check(GROUP_BUILD, "App builds with npm run build", app_is_built),
    Check(GROUP_BUILD, "Build runs after tests", build_follows_tests),
    Check(
        GROUP_BUILD,
        "Manifest defines build scripts",
        manifest_defines_build_scripts,
        needs_manifest=True,
    ),
    Check(GROUP_PUBLISH, "App is published with curl", app_is_published),
    Check(GROUP_PUBLISH, "Publish runs after build", publish_follows_build),
    Check(GROUP_PUBLISH, "Artifactory env is configured", publish_env_is_configured),
    Check(GROUP_PUBLISH, "Publish uses PUT", publish_uses_put),
    Check(GROUP_PUBLISH, "Publish references the artifact", publish_references_artifact),
    Check(GROUP_TRIGGERS, "Triggered on push to main", triggered_on_push),
    Check(GROUP_TRIGGERS, "Triggered on pull requests to main", triggered_on_pull_request),
    Check(GROUP_JOB, "Job runs on ubuntu-latest", job_runs_on_expected_runner),
    Check(GROUP_JOB, "All steps present in order", steps_are_in_order),
]


def run_check(check: Check, docs: Documents) -> dict[str, Any]:
    """Evaluate one check and return a passed/failed result."""
    try:
        check.func(docs)
    except CheckFailure as e:
        logger.debug("Check failed: %s: %s", check.name, e.message)
        return failed(check.group, check.name, e)
    return passed(check.group, check.name)


def run_battery(
    workflow: WorkflowDocument,
    manifest: Optional[ManifestDocument] = None,
    job: str = DEFAULT_JOB,
    checks: Optional[list[Check]] = None,
) -> list[dict[str, Any]]:
    """
    Run every check against the loaded documents.

    Manifest checks are skipped (not failed) when no manifest is given.

    Returns:
        One result per evaluated check, in declaration order
    """
    docs = Documents(workflow=workflow, manifest=manifest, job=job)
    results = []
    for check in checks if checks is not None else CHECKS:
        if check.needs_manifest and manifest is None:
            logger.debug("Skipping %s: no manifest loaded", check.name)
            continue
        results.append(run_check(check, docs))
    return results


def summarize(results: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Summarize battery results.

    Returns:
        Dictionary with 'valid' boolean, 'passed'/'failed' counts and an
        'errors' list of "<check>: <message>" strings
    """
    errors = [
        f"{result['check']}: {result['error']}"
        for result in results
        if not result["success"]
    ]
    return {
        "valid": len(errors) == 0,
        "passed": len(results) - len(errors),
        "failed": len(errors),
        "errors": errors,
    }
