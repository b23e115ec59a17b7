"""
Check command - validate a CI workflow and its package manifest.

Exit codes:
- 0: every check passed
- 1: one or more checks failed
- 2: the workflow or manifest could not be loaded
"""

import sys

import click

from pipecheck.commands.battery import run_battery
from pipecheck.commands.config import resolve_config
from pipecheck.commands.errors import SetupError
from pipecheck.commands.loader import load_manifest, load_workflow_document
from pipecheck.commands.report import render_results, render_steps
from pipecheck.commands.result import format_error
from pipecheck.commands.utils import console

EXIT_CHECKS_FAILED = 1
EXIT_SETUP_FAILED = 2


def _report_setup_error(prefix, error, verbose=False):
    console.print(f"[red]{prefix}: {error.message}[/red]")
    if verbose:
        formatted = format_error(error, include_traceback=False)
        console.print(f"[yellow]Error code: {formatted.get('code', '-')}[/yellow]")
        if formatted.get("details"):
            console.print(formatted["details"])


@click.command()
@click.option(
    "--workflow",
    "-w",
    type=click.Path(dir_okay=False),
    help="Workflow file to check (default: $PIPECHECK_WORKFLOW or .github/workflows/ci.yml)",
)
@click.option(
    "--manifest",
    "-m",
    type=click.Path(dir_okay=False),
    help="Package manifest to check (default: $PIPECHECK_MANIFEST or package.json)",
)
@click.option(
    "--job",
    "-j",
    help="Job whose steps are checked (default: $PIPECHECK_JOB or build)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show expected vs. actual for failures")
def check(workflow, manifest, job, verbose):
    """
    Validate a CI workflow against the build pipeline contract.

    This command checks:
    • Required steps exist in the expected order
    • Steps carry the expected action, inputs, commands and env
    • The workflow is triggered on push and pull requests to main
    • The package manifest defines dependencies and build/test scripts
    """
    config = resolve_config(workflow=workflow, manifest=manifest, job=job)

    try:
        workflow_doc = load_workflow_document(config.workflow_path)
        manifest_doc = load_manifest(config.manifest_path)
    except SetupError as e:
        _report_setup_error("Failed to load inputs", e, verbose)
        sys.exit(EXIT_SETUP_FAILED)

    if verbose:
        console.print(f"[cyan]Workflow: {config.workflow_path}[/cyan]")
        console.print(f"[cyan]Manifest: {config.manifest_path}[/cyan]")
        console.print(f"[cyan]Job: {config.job}[/cyan]")

    results = run_battery(workflow_doc, manifest_doc, job=config.job)
    summary = render_results(results, verbose=verbose)
    if not summary["valid"]:
        sys.exit(EXIT_CHECKS_FAILED)


@click.command()
@click.option(
    "--workflow",
    "-w",
    type=click.Path(dir_okay=False),
    help="Workflow file to read (default: $PIPECHECK_WORKFLOW or .github/workflows/ci.yml)",
)
@click.option("--job", "-j", help="Job to list (default: $PIPECHECK_JOB or build)")
def steps(workflow, job):
    """List a job's steps in declared order."""
    config = resolve_config(workflow=workflow, job=job)
    try:
        workflow_doc = load_workflow_document(config.workflow_path)
    except SetupError as e:
        _report_setup_error("Failed to load workflow", e)
        sys.exit(EXIT_SETUP_FAILED)

    job_spec = workflow_doc.job(config.job)
    if job_spec is None:
        available = workflow_doc.jobs.keys() if workflow_doc.jobs is not None else []
        console.print(
            f"[red]Job '{config.job}' not found. "
            f"Available jobs: {', '.join(available) or 'none'}[/red]"
        )
        sys.exit(EXIT_CHECKS_FAILED)

    render_steps(job_spec)
