"""Contracts for the four steps of a doc-publish job.

Each step is synchronous and blocking: the job runs them strictly one after
the other. A step signals failure by raising the matching
`core.errors.StepError` subclass; returning normally means success. The
returned string is a short detail kept in the job report.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import EventContext


@runtime_checkable
class RepositoryCheckout(Protocol):
    """Acquire a clean snapshot of the repository at the triggering commit."""

    def checkout(self, event: EventContext, workspace: Path) -> str | None:
        ...


@runtime_checkable
class ToolchainInstaller(Protocol):
    """Install (or resolve) the toolchain version requested by the workflow."""

    def install(self, toolchain: str) -> str | None:
        ...


@runtime_checkable
class BuildRunner(Protocol):
    """Run the opaque documentation build script."""

    def run(self, script: str, workspace: Path, env: dict[str, str]) -> str | None:
        ...


@runtime_checkable
class Publisher(Protocol):
    """Mirror the build output directory to the hosting destination."""

    def publish(self, source_dir: Path, event: EventContext) -> str | None:
        ...
