from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.models import EventContext
from core.errors import BuildScriptError, PublishError

DOC_DIR = "target/wasm32-unknown-unknown/doc/"

_GITHUB_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_EVENT_NAME",
    "GITHUB_REF",
    "GITHUB_REF_NAME",
    "GITHUB_HEAD_REF",
    "GITHUB_SHA",
    "GITHUB_REPOSITORY",
    "GITHUB_SERVER_URL",
    "GITHUB_API_URL",
    "DOCPUB_GITHUB_TOKEN",
    "DOCPUB_WORKFLOW_PATH",
    "DOCPUB_WORKSPACE",
    "DOCPUB_LOG_LEVEL",
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture(autouse=True)
def _clean_ci_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _GITHUB_VARS:
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides: object) -> AppSettings:
    return AppSettings(_env_file=None, **overrides)


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(0o755)
    return path


def git(*args: str, cwd: Path | None = None) -> str:
    completed = subprocess.run(
        ["git", "-c", "user.name=test", "-c", "user.email=test@example.com", *args],
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout.strip()


class Recorder:
    def __init__(self) -> None:
        self.calls: list[str] = []


class FakeCheckout:
    def __init__(self, recorder: Recorder) -> None:
        self.recorder = recorder

    def checkout(self, event: EventContext, workspace: Path) -> str | None:
        self.recorder.calls.append("checkout")
        return "HEAD at abc123"


class FakeToolchain:
    def __init__(self, recorder: Recorder) -> None:
        self.recorder = recorder
        self.installed: list[str] = []

    def install(self, toolchain: str) -> str | None:
        self.recorder.calls.append("toolchain")
        self.installed.append(toolchain)
        return f"rustc ({toolchain})"


class FakeBuild:
    def __init__(self, recorder: Recorder, exit_code: int = 0) -> None:
        self.recorder = recorder
        self.exit_code = exit_code
        self.env: dict[str, str] | None = None

    def run(self, script: str, workspace: Path, env: dict[str, str]) -> str | None:
        self.recorder.calls.append("build")
        self.env = env
        if self.exit_code != 0:
            raise BuildScriptError(f"{script} exited with status {self.exit_code}", exit_code=self.exit_code)
        return f"{script} exited 0"


class FakePublisher:
    def __init__(self, recorder: Recorder, fail: bool = False) -> None:
        self.recorder = recorder
        self.fail = fail
        self.sources: list[Path] = []

    def publish(self, source_dir: Path, event: EventContext) -> str | None:
        self.recorder.calls.append("publish")
        self.sources.append(source_dir)
        if self.fail:
            raise PublishError("push rejected")
        return "pushed"


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
