"""
Contract tests for the CI workflow and the package manifest.

These run against the documents named by PIPECHECK_WORKFLOW and
PIPECHECK_MANIFEST (the bundled fixtures by default).
"""

import pytest

from pipecheck.commands.checks import (
    check_contains,
    check_field,
    check_full_ordering,
    check_step_order,
    find_step_by_name,
    require_step,
)
from pipecheck.commands.constants import (
    ARTIFACTORY_ENV_VARS,
    EXPECTED_STEPS,
    STEP_BUILD,
    STEP_CHECKOUT,
    STEP_INSTALL,
    STEP_PUBLISH,
    STEP_SETUP_NODE,
    STEP_TEST,
)


class TestNodeVersionSetup:
    """Node.js version setup."""

    def test_node_20_is_set_up(self, build_job):
        """Test that Node.js 20 is set up with actions/setup-node@v2."""
        step = require_step(build_job, STEP_SETUP_NODE)
        check_field(step, "uses", equals="actions/setup-node@v2")
        check_field(step, "with")
        check_field(step, "with['node-version']", equals="20")

    def test_setup_comes_after_checkout(self, build_job):
        check_step_order(build_job, STEP_CHECKOUT, STEP_SETUP_NODE)


class TestDependencyInstallation:
    """Dependency installation."""

    def test_dependencies_are_installed(self, build_job):
        step = require_step(build_job, STEP_INSTALL)
        check_field(step, "run", contains="npm install")

    def test_install_comes_after_node_setup(self, build_job):
        check_step_order(build_job, STEP_SETUP_NODE, STEP_INSTALL)

    def test_manifest_declares_dependencies(self, manifest):
        """Test that package.json has a non-empty dependencies mapping."""
        dependencies = manifest.dependencies
        assert dependencies is not None
        assert len(dependencies) > 0


class TestUnitTestExecution:
    """Unit test execution."""

    def test_tests_run_with_npm_test(self, build_job):
        step = require_step(build_job, STEP_TEST)
        check_field(step, "run", contains="npm test")

    def test_tests_run_after_install(self, build_job):
        check_step_order(build_job, STEP_INSTALL, STEP_TEST)

    def test_manifest_defines_test_script(self, manifest):
        script = manifest.script("test")
        assert isinstance(script, str)
        assert script.strip()


class TestApplicationBuild:
    """Application build."""

    def test_app_builds_with_npm_run_build(self, build_job):
        step = require_step(build_job, STEP_BUILD)
        check_field(step, "run", contains="npm run build")

    def test_build_runs_after_tests(self, build_job):
        check_step_order(build_job, STEP_TEST, STEP_BUILD)

    @pytest.mark.parametrize("script", ["build:frontend", "build:server"])
    def test_manifest_defines_build_script(self, manifest, script):
        value = manifest.script(script)
        assert isinstance(value, str)
        assert value.strip()


class TestArtifactoryPublishing:
    """JFrog Artifactory publishing."""

    def test_app_is_published_with_curl(self, build_job):
        """Test that the publish step uploads with curl using the Artifactory env."""
        step = require_step(build_job, STEP_PUBLISH)
        check_field(step, "run", contains=["curl", *ARTIFACTORY_ENV_VARS])

    def test_publish_runs_after_build(self, build_job):
        check_step_order(build_job, STEP_BUILD, STEP_PUBLISH)

    def test_artifactory_env_is_configured(self, build_job):
        step = require_step(build_job, STEP_PUBLISH)
        check_field(step, "env")
        for var in ARTIFACTORY_ENV_VARS:
            check_contains(step.env, var, label="publish env")
            check_field(step, f"env['{var}']")

    def test_publish_uses_put(self, build_job):
        step = require_step(build_job, STEP_PUBLISH)
        check_field(step, "run", contains="-X PUT")

    def test_publish_references_artifact_paths(self, build_job):
        step = require_step(build_job, STEP_PUBLISH)
        check_field(
            step,
            "run",
            contains=["./dist/juice-shop.tar.gz", "juice-shop/latest/juice-shop.tar.gz"],
        )


class TestWorkflowTriggers:
    """Workflow triggers."""

    def test_triggered_on_push_to_main(self, workflow):
        check_contains(workflow.triggers, "push", label="on")
        check_contains(workflow.branches("push"), "main", label="on.push.branches")

    def test_triggered_on_pull_requests_to_main(self, workflow):
        check_contains(workflow.triggers, "pull_request", label="on")
        check_contains(
            workflow.branches("pull_request"), "main", label="on.pull_request.branches"
        )


class TestJobConfiguration:
    """Job configuration."""

    def test_job_runs_on_ubuntu_latest(self, build_job):
        check_field(build_job, "runs-on", equals="ubuntu-latest")

    @pytest.mark.parametrize("name", EXPECTED_STEPS)
    def test_required_step_is_present(self, build_job, name):
        assert find_step_by_name(build_job, name) is not None

    def test_all_steps_present_in_order(self, build_job):
        check_full_ordering(build_job, EXPECTED_STEPS)
