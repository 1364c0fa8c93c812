"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import check_repository_access
from adapters.workflow_loader import load_workflow
from core.config import AppSettings
from core.errors import WorkflowConfigError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_executable(name: str) -> tuple[bool, str]:
    path = shutil.which(name)
    if path:
        return True, path
    return False, f"{name} not found on PATH"


def _check_script(workspace: Path, script: str) -> tuple[bool, str]:
    path = workspace / script
    if not path.is_file():
        return False, f"{path} missing"
    if not os.access(path, os.X_OK):
        return False, f"{path} is not executable"
    return True, str(path)


@app.command()
def run(
    repository: str | None = typer.Option(
        None,
        "--repository",
        help="owner/name to probe on the GitHub API (defaults to GITHUB_REPOSITORY).",
    ),
    offline: bool = typer.Option(False, "--offline", help="Skip the GitHub API probe."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    repository = repository or os.environ.get("GITHUB_REPOSITORY") or None

    table = Table(title="docpub doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        workflow = load_workflow(settings.workflow_path)
        table.add_row("Workflow", "OK", str(settings.workflow_path or "built-in defaults"))
    except WorkflowConfigError as exc:
        table.add_row("Workflow", "FAIL", str(exc))
        _console.print(table)
        raise typer.Exit(code=1) from exc

    ok_git, detail_git = _check_executable(settings.git_executable)
    table.add_row("git", "OK" if ok_git else "FAIL", detail_git)

    ok_rustup, detail_rustup = _check_executable(settings.rustup_executable)
    table.add_row("rustup", "OK" if ok_rustup else "OPTIONAL", detail_rustup)

    ok_script, detail_script = _check_script(settings.workspace, workflow.build_script)
    table.add_row("Build script", "OK" if ok_script else "FAIL", detail_script)

    if settings.token_value():
        table.add_row("Token", "OK", "set (value hidden)")
    else:
        table.add_row("Token", "OPTIONAL", "No token -> publish step will fail on push to " + workflow.publish_branch)

    if offline:
        table.add_row("GitHub API", "SKIPPED", "--offline")
    else:
        ok_http, detail_http = asyncio.run(check_repository_access(repository, settings=settings))
        table.add_row("GitHub API", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_rustup:
        _console.print(
            "\n[yellow]Note:[/yellow] without rustup, run jobs with `--no-toolchain`."
        )
