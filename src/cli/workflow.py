"""Inspection of the effective workflow definition."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from adapters.workflow_loader import load_workflow
from core.config import AppSettings
from core.errors import WorkflowConfigError

app = typer.Typer(no_args_is_help=True, help="Inspect the workflow definition.")

_console = Console()


@app.command()
def show(
    workflow_file: Path | None = typer.Option(
        None,
        "--workflow-file",
        help="JSON workflow definition (defaults to DOCPUB_WORKFLOW_PATH or built-in).",
    ),
) -> None:
    """Print the effective workflow as JSON."""

    path = workflow_file or AppSettings().workflow_path
    try:
        workflow = load_workflow(path)
    except WorkflowConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--workflow-file") from exc

    _console.print_json(json.dumps(workflow.model_dump(mode="json")))
