from __future__ import annotations

from pathlib import Path

import pytest

from conftest import DOC_DIR, FakeBuild, FakeCheckout, FakePublisher, FakeToolchain, Recorder
from core.domain.models import EventContext, EventType, JobState, StepName, StepOutcome, StepResult
from core.domain.workflow import DocPublishWorkflow
from core.errors import InvalidTransitionError
from core.services.doc_publish_pipeline import (
    JobRequest,
    JobSteps,
    PipelineHooks,
    _Job,
    run_job,
)

PUSH_DEV = EventContext(event_type=EventType.PUSH, branch="dev", repository="octo/crate", sha="abc")
PR_FEATURE = EventContext(event_type=EventType.PULL_REQUEST, branch="feature/x")


def _steps(recorder: Recorder, *, exit_code: int = 0, publish_fails: bool = False) -> JobSteps:
    return JobSteps(
        checkout=FakeCheckout(recorder),
        toolchain=FakeToolchain(recorder),
        build=FakeBuild(recorder, exit_code=exit_code),
        publisher=FakePublisher(recorder, fail=publish_fails),
    )


def test_push_to_dev_builds_then_publishes(recorder: Recorder, tmp_path: Path) -> None:
    steps = _steps(recorder)

    result = run_job(request=JobRequest(event=PUSH_DEV, workspace=tmp_path), steps=steps)

    assert recorder.calls == ["checkout", "toolchain", "build", "publish"]
    assert result.state is JobState.DONE
    assert result.published is True
    assert result.publish_dir == DOC_DIR
    assert steps.publisher.sources == [tmp_path / DOC_DIR]
    assert result.history == [
        JobState.PENDING,
        JobState.CHECKED_OUT,
        JobState.TOOLCHAIN_READY,
        JobState.BUILT,
        JobState.PUBLISHED,
        JobState.DONE,
    ]


def test_pull_request_builds_but_skips_publish(recorder: Recorder, tmp_path: Path) -> None:
    result = run_job(request=JobRequest(event=PR_FEATURE, workspace=tmp_path), steps=_steps(recorder))

    assert recorder.calls == ["checkout", "toolchain", "build"]
    assert result.state is JobState.DONE
    assert result.published is False
    assert result.history[-2:] == [JobState.SKIPPED, JobState.DONE]
    assert result.step(StepName.PUBLISH).outcome is StepOutcome.SKIPPED


def test_push_to_other_branch_skips_publish(recorder: Recorder, tmp_path: Path) -> None:
    event = EventContext(event_type=EventType.PUSH, branch="main")

    result = run_job(request=JobRequest(event=event, workspace=tmp_path), steps=_steps(recorder))

    assert "publish" not in recorder.calls
    assert result.state is JobState.DONE


def test_failing_build_prevents_publish(recorder: Recorder, tmp_path: Path) -> None:
    result = run_job(
        request=JobRequest(event=PUSH_DEV, workspace=tmp_path),
        steps=_steps(recorder, exit_code=1),
    )

    assert recorder.calls == ["checkout", "toolchain", "build"]
    assert result.state is JobState.FAILED
    assert result.published is False
    assert result.history[-1] is JobState.FAILED
    assert result.step(StepName.BUILD).outcome is StepOutcome.FAILED
    assert result.step(StepName.PUBLISH) is None
    assert "build" in result.error


def test_publish_failure_fails_the_job(recorder: Recorder, tmp_path: Path) -> None:
    result = run_job(
        request=JobRequest(event=PUSH_DEV, workspace=tmp_path),
        steps=_steps(recorder, publish_fails=True),
    )

    assert result.state is JobState.FAILED
    assert result.history == [
        JobState.PENDING,
        JobState.CHECKED_OUT,
        JobState.TOOLCHAIN_READY,
        JobState.BUILT,
        JobState.FAILED,
    ]
    assert result.error == "publish: push rejected"


def test_disabled_steps_are_recorded_as_skipped(recorder: Recorder, tmp_path: Path) -> None:
    steps = JobSteps(build=FakeBuild(recorder), publisher=FakePublisher(recorder))

    result = run_job(request=JobRequest(event=PR_FEATURE, workspace=tmp_path), steps=steps)

    assert recorder.calls == ["build"]
    assert result.step(StepName.CHECKOUT).outcome is StepOutcome.SKIPPED
    assert result.step(StepName.TOOLCHAIN).outcome is StepOutcome.SKIPPED
    assert JobState.CHECKED_OUT in result.history
    assert result.state is JobState.DONE


def test_dry_run_evaluates_gate_without_publishing(recorder: Recorder, tmp_path: Path) -> None:
    result = run_job(
        request=JobRequest(event=PUSH_DEV, workspace=tmp_path, dry_run=True),
        steps=_steps(recorder),
    )

    assert "publish" not in recorder.calls
    assert result.published is False
    assert result.publish_dir == DOC_DIR
    assert result.history[-2:] == [JobState.SKIPPED, JobState.DONE]


def test_workflow_values_reach_the_steps(recorder: Recorder, tmp_path: Path) -> None:
    steps = _steps(recorder)
    workflow = DocPublishWorkflow(toolchain="1.79.0", env={"CARGO_TERM_COLOR": "never"})

    run_job(request=JobRequest(event=PR_FEATURE, workspace=tmp_path, workflow=workflow), steps=steps)

    assert steps.toolchain.installed == ["1.79.0"]
    assert steps.build.env == {"CARGO_TERM_COLOR": "never"}


def test_same_inputs_same_outcome(tmp_path: Path) -> None:
    outcomes = []
    for _ in range(2):
        result = run_job(
            request=JobRequest(event=PUSH_DEV, workspace=tmp_path),
            steps=_steps(Recorder(), exit_code=1),
        )
        outcomes.append((result.state, result.history, [s.outcome for s in result.steps]))

    assert outcomes[0] == outcomes[1]


def test_hooks_observe_every_transition(recorder: Recorder, tmp_path: Path) -> None:
    seen_states: list[JobState] = []
    started: list[StepName] = []
    finished: list[StepResult] = []
    hooks = PipelineHooks(
        state_changed=seen_states.append,
        step_started=started.append,
        step_finished=finished.append,
    )

    run_job(request=JobRequest(event=PUSH_DEV, workspace=tmp_path), steps=_steps(recorder), hooks=hooks)

    assert started == [StepName.CHECKOUT, StepName.TOOLCHAIN, StepName.BUILD, StepName.PUBLISH]
    assert seen_states[-1] is JobState.DONE
    assert [(s.step, s.outcome) for s in finished] == [
        (StepName.CHECKOUT, StepOutcome.SUCCEEDED),
        (StepName.TOOLCHAIN, StepOutcome.SUCCEEDED),
        (StepName.BUILD, StepOutcome.SUCCEEDED),
        (StepName.PUBLISH, StepOutcome.SUCCEEDED),
    ]


def test_step_finished_reports_failure_and_skips(recorder: Recorder, tmp_path: Path) -> None:
    finished: list[StepResult] = []
    steps = JobSteps(build=FakeBuild(recorder, exit_code=2), publisher=FakePublisher(recorder))

    run_job(
        request=JobRequest(event=PUSH_DEV, workspace=tmp_path),
        steps=steps,
        hooks=PipelineHooks(step_finished=finished.append),
    )

    assert [(s.step, s.outcome) for s in finished] == [
        (StepName.CHECKOUT, StepOutcome.SKIPPED),
        (StepName.TOOLCHAIN, StepOutcome.SKIPPED),
        (StepName.BUILD, StepOutcome.FAILED),
    ]


def test_illegal_transitions_are_rejected(tmp_path: Path) -> None:
    job = _Job(JobRequest(event=PUSH_DEV, workspace=tmp_path), PipelineHooks())

    with pytest.raises(InvalidTransitionError):
        job.transition(JobState.BUILT)

    job.transition(JobState.FAILED)
    with pytest.raises(InvalidTransitionError):
        job.transition(JobState.FAILED)
