"""Rich UI components for the CLI.

Kept apart from the commands so tables and panels can be shared between
`run` and `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import JobResult, JobState, StepOutcome

_OUTCOME_STYLES: dict[StepOutcome, str] = {
    StepOutcome.SUCCEEDED: "green",
    StepOutcome.SKIPPED: "yellow",
    StepOutcome.FAILED: "bold red",
}


def print_banner(console: Console, workflow_name: str) -> None:
    """Print the welcome banner (disabled with `--no-banner` in pipelines)."""

    title = Text("docpub", style="bold cyan")
    subtitle = Text(f"{workflow_name} • build • publish", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_steps_table(result: JobResult) -> Table:
    table = Table(title="Job steps")
    table.add_column("Step", style="cyan", no_wrap=True)
    table.add_column("Outcome")
    table.add_column("Seconds", justify="right", style="dim")
    table.add_column("Detail", style="white")

    for step in result.steps:
        elapsed = (step.finished_at - step.started_at).total_seconds()
        table.add_row(
            step.step.value,
            Text(step.outcome.value, style=_OUTCOME_STYLES[step.outcome]),
            f"{elapsed:.1f}",
            step.detail or "",
        )
    return table


def build_summary_panel(result: JobResult) -> Panel:
    failed = result.state is JobState.FAILED
    body = Text()
    body.append(f"Event: {result.event.event_type.value} on {result.event.branch or '-'}\n")
    body.append("States: " + " -> ".join(state.value for state in result.history) + "\n")
    body.append(f"Published: {'yes' if result.published else 'no'}")
    if result.publish_dir:
        body.append(f" ({result.publish_dir})", style="dim")
    if result.error:
        body.append(f"\nError: {result.error}", style="red")

    return Panel(
        body,
        title=Text(result.state.value.upper(), style="bold red" if failed else "bold green"),
        border_style="red" if failed else "green",
    )
