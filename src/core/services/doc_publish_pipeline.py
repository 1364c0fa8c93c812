"""Doc-publish job orchestration.

Runs the four steps of a job in strict order (checkout, toolchain, build,
publish) and drives the job state machine:

    pending -> checked_out -> toolchain_ready -> built -> (published | skipped) -> done

Any `StepError` moves the job to `failed` and stops it; later steps never run.
Printing and progress stay in the CLI layer through `PipelineHooks`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from core.domain.models import (
    ALLOWED_TRANSITIONS,
    EventContext,
    JobResult,
    JobState,
    StepName,
    StepOutcome,
    StepResult,
)
from core.domain.workflow import DocPublishWorkflow
from core.errors import InvalidTransitionError, StepError
from core.interfaces.steps import BuildRunner, Publisher, RepositoryCheckout, ToolchainInstaller
from core.triggers import should_publish_event

logger = logging.getLogger(__name__)


@dataclass
class JobSteps:
    """Concrete step implementations. `None` disables a step (recorded as skipped)."""

    build: BuildRunner
    publisher: Publisher
    checkout: RepositoryCheckout | None = None
    toolchain: ToolchainInstaller | None = None


@dataclass
class JobRequest:
    """Parameters of a single job run."""

    event: EventContext
    workspace: Path
    workflow: DocPublishWorkflow = field(default_factory=DocPublishWorkflow)
    dry_run: bool = False


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    state_changed: Callable[[JobState], None] | None = None
    step_started: Callable[[StepName], None] | None = None
    step_finished: Callable[[StepResult], None] | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _Job:
    def __init__(self, request: JobRequest, hooks: PipelineHooks) -> None:
        self.request = request
        self.hooks = hooks
        self.result = JobResult(event=request.event)

    def transition(self, target: JobState) -> None:
        current = self.result.state
        if target is JobState.FAILED:
            if current.is_terminal:
                raise InvalidTransitionError(current, target)
        elif target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(current, target)

        logger.debug("job state %s -> %s", current.value, target.value)
        self.result.state = target
        self.result.history.append(target)
        if self.hooks.state_changed:
            self.hooks.state_changed(target)

    def record(self, step: StepResult) -> None:
        self.result.steps.append(step)
        if self.hooks.step_finished:
            self.hooks.step_finished(step)

    def skip(self, name: StepName, reason: str) -> None:
        logger.info("step %s skipped: %s", name.value, reason)
        now = _now()
        self.record(
            StepResult(
                step=name,
                outcome=StepOutcome.SKIPPED,
                detail=reason,
                started_at=now,
                finished_at=now,
            )
        )

    def execute(self, name: StepName, action: Callable[[], str | None]) -> bool:
        """Run one step; returns False (job failed) when it raised a `StepError`."""

        if self.hooks.step_started:
            self.hooks.step_started(name)
        logger.info("step %s started", name.value)
        started = _now()
        try:
            detail = action()
        except StepError as exc:
            logger.error("step %s failed: %s", name.value, exc.message)
            self.record(
                StepResult(
                    step=name,
                    outcome=StepOutcome.FAILED,
                    detail=exc.message,
                    started_at=started,
                    finished_at=_now(),
                )
            )
            self.result.error = f"{name.value}: {exc.message}"
            self.transition(JobState.FAILED)
            return False

        logger.info("step %s succeeded", name.value)
        self.record(
            StepResult(
                step=name,
                outcome=StepOutcome.SUCCEEDED,
                detail=detail,
                started_at=started,
                finished_at=_now(),
            )
        )
        return True


def run_job(
    *,
    request: JobRequest,
    steps: JobSteps,
    hooks: PipelineHooks | None = None,
) -> JobResult:
    """Run one job and return its (terminal) result.

    Only `StepError` is handled here; any other exception is a bug and
    propagates to the caller.
    """

    job = _Job(request, hooks or PipelineHooks())
    workflow = request.workflow
    event = request.event
    workspace = request.workspace

    logger.info(
        "job %s for %s on %r",
        workflow.name,
        event.event_type.value,
        event.branch,
    )

    checkout = steps.checkout
    if checkout is None:
        job.skip(StepName.CHECKOUT, "checkout disabled")
    elif not job.execute(StepName.CHECKOUT, lambda: checkout.checkout(event, workspace)):
        return job.result
    job.transition(JobState.CHECKED_OUT)

    toolchain = steps.toolchain
    if toolchain is None:
        job.skip(StepName.TOOLCHAIN, "toolchain installation disabled")
    elif not job.execute(StepName.TOOLCHAIN, lambda: toolchain.install(workflow.toolchain)):
        return job.result
    job.transition(JobState.TOOLCHAIN_READY)

    build_env = dict(workflow.env)
    if not job.execute(
        StepName.BUILD,
        lambda: steps.build.run(workflow.build_script, workspace, build_env),
    ):
        return job.result
    job.transition(JobState.BUILT)

    if not should_publish_event(event, workflow):
        job.skip(
            StepName.PUBLISH,
            f"only pushes to {workflow.publish_branch!r} publish",
        )
        job.transition(JobState.SKIPPED)
    elif request.dry_run:
        job.result.publish_dir = workflow.publish_dir
        job.skip(StepName.PUBLISH, f"dry run: would publish {workflow.publish_dir}")
        job.transition(JobState.SKIPPED)
    else:
        job.result.publish_dir = workflow.publish_dir
        source_dir = workspace / workflow.publish_dir
        if not job.execute(
            StepName.PUBLISH,
            lambda: steps.publisher.publish(source_dir, event),
        ):
            return job.result
        job.result.published = True
        job.transition(JobState.PUBLISHED)

    job.transition(JobState.DONE)
    logger.info("job %s done (published=%s)", workflow.name, job.result.published)
    return job.result
