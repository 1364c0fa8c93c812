"""Error taxonomy of a doc-publish job.

Every step failure is fatal to the run and is never retried. Adapters raise a
`StepError` subclass; the pipeline records it and ends the job in `Failed`.
"""

from __future__ import annotations

from core.domain.models import JobState, StepName


class DocPublishError(Exception):
    """Base class for every error raised by docpub."""


class WorkflowConfigError(DocPublishError):
    """The workflow definition could not be loaded or validated."""


class InvalidTransitionError(DocPublishError):
    """A job tried to move between two states that are not connected."""

    def __init__(self, current: JobState, target: JobState) -> None:
        super().__init__(f"illegal transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


class StepError(DocPublishError):
    """A step of the job failed."""

    step: StepName

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CheckoutError(StepError):
    step = StepName.CHECKOUT


class ToolchainInstallError(StepError):
    step = StepName.TOOLCHAIN


class BuildScriptError(StepError):
    step = StepName.BUILD

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class PublishError(StepError):
    step = StepName.PUBLISH


__all__ = [
    "BuildScriptError",
    "CheckoutError",
    "DocPublishError",
    "InvalidTransitionError",
    "PublishError",
    "StepError",
    "ToolchainInstallError",
    "WorkflowConfigError",
]
