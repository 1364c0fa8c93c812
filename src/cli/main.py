"""docpub command-line interface (typer).

Commands:
- `run`: one doc-publish job for an event.
- `should-publish`: the publish gate alone, usable from shell scripts.
- `doctor` / `workflow`: diagnostics and inspection sub-apps.
"""

from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console

from adapters.build_script import ScriptBuildRunner
from adapters.gh_pages_publisher import GhPagesPublisher
from adapters.git_checkout import GitCheckout
from adapters.json_exporter import export_job_json
from adapters.rust_toolchain import RustupToolchain
from adapters.workflow_loader import load_workflow
from cli import doctor, workflow as workflow_cli
from cli.logging_setup import configure_logging
from cli.ui_components import build_steps_table, build_summary_panel, print_banner
from core.config import AppSettings
from core.domain.models import EventContext, EventType, StepName, StepResult, branch_from_ref
from core.errors import WorkflowConfigError
from core.services.doc_publish_pipeline import JobRequest, JobSteps, PipelineHooks, run_job
from core.triggers import should_publish, should_trigger

app = typer.Typer(
    no_args_is_help=True,
    help="Build crate documentation and publish it to a pages branch.",
)
app.add_typer(doctor.app, name="doctor")
app.add_typer(workflow_cli.app, name="workflow")

_console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    configure_logging(verbose=verbose)


def _resolve_event(
    *,
    from_env: bool,
    event: str | None,
    branch: str | None,
    sha: str | None,
    repository: str | None,
) -> EventContext:
    if from_env:
        try:
            context = EventContext.from_environment(os.environ)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--from-env") from exc
        updates = {
            key: value
            for key, value in (
                ("branch", branch_from_ref(branch) if branch else None),
                ("ref", f"refs/heads/{branch_from_ref(branch)}" if branch else None),
                ("sha", sha),
                ("repository", repository),
            )
            if value
        }
        return context.model_copy(update=updates) if updates else context

    if not event:
        raise typer.BadParameter("pass --event or --from-env", param_hint="--event")
    try:
        event_type = EventType.parse(event)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--event") from exc

    short_branch = branch_from_ref(branch or "")
    return EventContext(
        event_type=event_type,
        branch=short_branch,
        ref=f"refs/heads/{short_branch}" if short_branch else None,
        sha=sha,
        repository=repository or os.environ.get("GITHUB_REPOSITORY") or None,
    )


@app.command(name="run")
def run_job_command(
    event: str | None = typer.Option(None, "--event", "-e", help="push | pull_request"),
    branch: str | None = typer.Option(None, "--branch", "-b", help="Branch name or refs/heads/<name>."),
    from_env: bool = typer.Option(False, "--from-env", help="Read the event from GITHUB_* variables."),
    sha: str | None = typer.Option(None, "--sha", help="Commit to check out."),
    repository: str | None = typer.Option(None, "--repository", help="owner/name."),
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Repository checkout directory."),
    workflow_file: Path | None = typer.Option(None, "--workflow-file", help="JSON workflow definition."),
    checkout: bool = typer.Option(True, "--checkout/--no-checkout", help="Run the git checkout step."),
    toolchain: bool = typer.Option(True, "--toolchain/--no-toolchain", help="Run the rustup step."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Evaluate the publish gate without publishing."),
    report_json: Path | None = typer.Option(None, "--report-json", help="Write the job result as JSON."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Run one doc-publish job: checkout, toolchain, build, publish (push to dev only)."""

    settings = AppSettings()
    try:
        workflow = load_workflow(workflow_file or settings.workflow_path)
    except WorkflowConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--workflow-file") from exc

    context = _resolve_event(
        from_env=from_env,
        event=event,
        branch=branch,
        sha=sha,
        repository=repository,
    )

    if not no_banner:
        print_banner(_console, workflow.name)

    if not should_trigger(context, workflow):
        _console.print(
            f"[yellow]{context.event_type.value} on {context.branch or '-'} does not trigger "
            f"{workflow.name}; nothing to do.[/yellow]"
        )
        return

    steps = JobSteps(
        checkout=GitCheckout(settings) if checkout else None,
        toolchain=(
            RustupToolchain(
                settings,
                targets=workflow.toolchain_targets,
                components=workflow.toolchain_components,
            )
            if toolchain
            else None
        ),
        build=ScriptBuildRunner(settings),
        publisher=GhPagesPublisher(settings, workflow),
    )

    def on_step_started(name: StepName) -> None:
        _console.print(f"[cyan]▶ {name.value}[/cyan]")

    def on_step_finished(step: StepResult) -> None:
        style = {"succeeded": "green", "skipped": "yellow"}.get(step.outcome.value, "red")
        _console.print(f"  [{style}]{step.outcome.value}[/{style}] {step.step.value}")

    request = JobRequest(
        event=context,
        workspace=(workspace or settings.workspace).resolve(),
        workflow=workflow,
        dry_run=dry_run,
    )
    hooks = PipelineHooks(step_started=on_step_started, step_finished=on_step_finished)
    result = run_job(request=request, steps=steps, hooks=hooks)

    _console.print(build_steps_table(result))
    _console.print(build_summary_panel(result))

    if report_json:
        path = export_job_json(result=result, output_path=report_json)
        _console.print(f"[green]Report written to:[/green] {path}")

    if not result.succeeded:
        raise typer.Exit(code=1)


@app.command(name="should-publish")
def should_publish_command(
    event: str = typer.Option(..., "--event", "-e", help="push | pull_request"),
    branch: str = typer.Option(..., "--branch", "-b", help="Branch name or refs/heads/<name>."),
    publish_branch: str | None = typer.Option(
        None,
        "--publish-branch",
        help="Branch whose pushes publish (defaults to the workflow's).",
    ),
) -> None:
    """Print `true`/`false`; exit status 0 only when the event would publish."""

    try:
        event_type = EventType.parse(event)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--event") from exc

    target = publish_branch
    if target is None:
        try:
            target = load_workflow(AppSettings().workflow_path).publish_branch
        except WorkflowConfigError as exc:
            raise typer.BadParameter(str(exc), param_hint="DOCPUB_WORKFLOW_PATH") from exc
    decision = should_publish(event_type, branch_from_ref(branch), target)
    typer.echo("true" if decision else "false")
    if not decision:
        raise typer.Exit(code=1)


def run() -> None:
    app()
