"""
Console reporting of battery results.
"""

from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pipecheck.commands.battery import summarize
from pipecheck.commands.document import JobSpec, StepSpec
from pipecheck.commands.utils import console as default_console


def _expected_vs_actual(result: dict[str, Any]) -> Optional[str]:
    details = {k: result[k] for k in ("expected", "actual") if k in result}
    if "expected" not in details and "actual" not in details:
        return None
    lines = []
    if "expected" in details:
        lines.append(f"- expected: {details['expected']!r}")
    if "actual" in details:
        lines.append(f"+ actual:   {details['actual']!r}")
    return "\n".join(lines)


def render_results(
    results: list[dict[str, Any]],
    verbose: bool = False,
    console: Optional[Console] = None,
) -> dict[str, Any]:
    """
    Print a table of check results followed by a summary line.

    Args:
        results: Results from run_battery
        verbose: Also print expected vs. actual for each failure
        console: Console to print to (defaults to the shared console)

    Returns:
        The summary from summarize()
    """
    console = console or default_console
    table = Table(title="CI Workflow Checks", box=box.ROUNDED)
    table.add_column("Group", style="cyan")
    table.add_column("Check", style="white")
    table.add_column("Status")
    table.add_column("Detail", style="yellow")

    for result in results:
        if result["success"]:
            table.add_row(result["group"], result["check"], "[green]PASS[/green]", "")
        else:
            table.add_row(
                result["group"], result["check"], "[red]FAIL[/red]", Text(result["error"])
            )

    console.print(table)

    if verbose:
        for result in results:
            if result["success"]:
                continue
            diff = _expected_vs_actual(result)
            if diff:
                console.print(f"\n[bold]{result['check']}[/bold]", highlight=False)
                console.print(diff, markup=False, highlight=False)

    summary = summarize(results)
    if summary["valid"]:
        console.print(
            f"\n[bold green]✅ All {summary['passed']} checks passed[/bold green]"
        )
    else:
        console.print(
            f"\n[bold red]❌ {summary['failed']} of "
            f"{summary['passed'] + summary['failed']} checks failed[/bold red]"
        )
    return summary


def _summarize_step(step: StepSpec) -> str:
    if step.uses:
        return step.uses
    lines = (step.run or "").strip().splitlines()
    if not lines:
        return "-"
    return lines[0] + (" ..." if len(lines) > 1 else "")


def render_steps(job: JobSpec, console: Optional[Console] = None) -> None:
    """Print a job's steps in declared order."""
    console = console or default_console
    table = Table(title=f"Steps of job '{job.name}'", box=box.ROUNDED)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Uses / Run", style="blue")

    for step in job.steps:
        table.add_row(str(step.index), Text(step.name or "-"), Text(_summarize_step(step)))

    console.print(table)
    console.print(f"  Runs on: {job.runs_on or 'N/A'}")
