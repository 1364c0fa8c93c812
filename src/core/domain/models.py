"""Domain models (Pydantic v2).

These models describe *what* a doc-publish job is (the triggering event, the
states it goes through, the result of every step), not *how* each step is
carried out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventType(str, Enum):
    """CI events able to trigger a job."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"

    @classmethod
    def parse(cls, value: str) -> "EventType":
        """Parse an event name as reported by the CI host (`GITHUB_EVENT_NAME`)."""

        normalized = value.strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"unsupported event type: {value!r}")


class JobState(str, Enum):
    """States of a single job run."""

    PENDING = "pending"
    CHECKED_OUT = "checked_out"
    TOOLCHAIN_READY = "toolchain_ready"
    BUILT = "built"
    PUBLISHED = "published"
    SKIPPED = "skipped"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.FAILED)


# Allowed forward transitions; FAILED is reachable from every non-terminal state.
ALLOWED_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.PENDING: frozenset({JobState.CHECKED_OUT}),
    JobState.CHECKED_OUT: frozenset({JobState.TOOLCHAIN_READY}),
    JobState.TOOLCHAIN_READY: frozenset({JobState.BUILT}),
    JobState.BUILT: frozenset({JobState.PUBLISHED, JobState.SKIPPED}),
    JobState.PUBLISHED: frozenset({JobState.DONE}),
    JobState.SKIPPED: frozenset({JobState.DONE}),
    JobState.DONE: frozenset(),
    JobState.FAILED: frozenset(),
}


class StepName(str, Enum):
    CHECKOUT = "checkout"
    TOOLCHAIN = "toolchain"
    BUILD = "build"
    PUBLISH = "publish"


class StepOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class EventContext(BaseModel):
    """The triggering event, as supplied by the CI host.

    `branch` is the short branch name: the pushed branch for `push`, the head
    branch for `pull_request`.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType = Field(
        ...,
        description="Event that triggered the job.",
    )
    branch: str = Field(
        default="",
        description="Short branch name (no `refs/heads/` prefix).",
    )
    ref: str | None = Field(
        default=None,
        description="Full git ref of the triggering commit (e.g. 'refs/heads/dev').",
    )
    sha: str | None = Field(
        default=None,
        description="Commit SHA to check out.",
    )
    repository: str | None = Field(
        default=None,
        description="Repository slug 'owner/name'.",
    )

    @classmethod
    def from_environment(cls, env: Mapping[str, str]) -> "EventContext":
        """Build the context from GitHub Actions variables.

        Reads `GITHUB_EVENT_NAME`, `GITHUB_REF`, `GITHUB_HEAD_REF`,
        `GITHUB_REF_NAME`, `GITHUB_SHA` and `GITHUB_REPOSITORY`. Raises
        `ValueError` when the event name is missing or unsupported.
        """

        event_name = (env.get("GITHUB_EVENT_NAME") or "").strip()
        if not event_name:
            raise ValueError("GITHUB_EVENT_NAME is not set")
        event_type = EventType.parse(event_name)

        ref = (env.get("GITHUB_REF") or "").strip() or None
        if event_type is EventType.PULL_REQUEST:
            branch = (env.get("GITHUB_HEAD_REF") or "").strip()
        else:
            branch = (env.get("GITHUB_REF_NAME") or "").strip()
            if not branch and ref:
                branch = branch_from_ref(ref)

        return cls(
            event_type=event_type,
            branch=branch,
            ref=ref,
            sha=(env.get("GITHUB_SHA") or "").strip() or None,
            repository=(env.get("GITHUB_REPOSITORY") or "").strip() or None,
        )


def branch_from_ref(ref: str) -> str:
    """`refs/heads/dev` -> `dev`. Non-branch refs are returned unchanged."""

    prefix = "refs/heads/"
    if ref.startswith(prefix):
        return ref[len(prefix):]
    return ref


class StepResult(BaseModel):
    """Outcome of one step of the job."""

    step: StepName
    outcome: StepOutcome
    detail: str | None = Field(
        default=None,
        description="Short human-readable detail (error message, skip reason).",
    )
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime = Field(default_factory=_utcnow)


class JobResult(BaseModel):
    """Aggregate describing one complete job run."""

    event: EventContext
    state: JobState = Field(
        default=JobState.PENDING,
        description="Current (final, once the job returns) state.",
    )
    history: list[JobState] = Field(
        default_factory=lambda: [JobState.PENDING],
        description="Every state visited, in order.",
    )
    steps: list[StepResult] = Field(default_factory=list)
    published: bool = False
    publish_dir: str | None = Field(
        default=None,
        description="Directory handed to the publisher (only set when publishing).",
    )
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.DONE

    def step(self, name: StepName) -> StepResult | None:
        for result in self.steps:
            if result.step is name:
                return result
        return None
