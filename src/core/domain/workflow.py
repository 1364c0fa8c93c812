"""Declarative definition of the doc-publish workflow.

The defaults reproduce the `rustdoc` workflow: push on `dev` or any pull
request, stable toolchain, `crates/wasm/build-docs.sh`, output mirrored from
`target/wasm32-unknown-unknown/doc/` to `gh-pages` only for pushes to `dev`.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

DEFAULT_BUILD_ENV: dict[str, str] = {
    "CARGO_TERM_COLOR": "always",
    "CARGO_REGISTRIES_CRATES_IO_PROTOCOL": "sparse",
}


class TriggerRules(BaseModel):
    """`on:` block of the workflow."""

    model_config = ConfigDict(extra="forbid")

    push_branches: list[str] = Field(
        default_factory=lambda: ["dev"],
        description="Branches whose pushes start a job.",
    )
    pull_request: bool = Field(
        default=True,
        description="Whether every pull request (any target) starts a job.",
    )


class DocPublishWorkflow(BaseModel):
    """The job definition: what to build, where it lands, when to publish."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="rustdoc", min_length=1)
    on: TriggerRules = Field(default_factory=TriggerRules)
    env: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_BUILD_ENV),
        description="Variables passed through to the build script.",
    )

    toolchain: str = Field(default="stable", min_length=1)
    toolchain_targets: list[str] = Field(default_factory=list)
    toolchain_components: list[str] = Field(default_factory=list)

    build_script: str = Field(
        default="crates/wasm/build-docs.sh",
        min_length=1,
        description="Script run with no arguments from the workspace root.",
    )
    publish_dir: str = Field(
        default="target/wasm32-unknown-unknown/doc/",
        min_length=1,
        description="Directory the build script writes to and the publisher mirrors.",
    )

    publish_branch: str = Field(
        default="dev",
        min_length=1,
        description="Only pushes to this branch publish.",
    )
    pages_branch: str = Field(default="gh-pages", min_length=1)
    cname: str | None = None
    enable_jekyll: bool = False
    keep_files: bool = False
    commit_message: str = Field(
        default="deploy: {sha}",
        description="Commit message template; `{sha}` is the triggering commit.",
    )

    @field_validator("build_script", "publish_dir")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        path = PurePosixPath(value)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError("must be a path relative to the workspace")
        return value

    @field_validator("commit_message")
    @classmethod
    def _sha_only_template(cls, value: str) -> str:
        try:
            value.format(sha="x")
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            raise ValueError(f"only the {{sha}} placeholder is supported: {exc!r}") from exc
        return value
