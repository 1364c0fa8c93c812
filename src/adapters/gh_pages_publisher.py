"""Publish step: mirror the build output to a `gh-pages` style branch.

Behaves like the usual gh-pages deploy action:

1. Clone the pages branch (shallow) into a temporary directory, or start an
   orphan branch when it does not exist yet.
2. Unless `keep_files`, remove everything but `.git`.
3. Copy the publish dir, add `.nojekyll` (unless `enable_jekyll`) and `CNAME`
   (when configured).
4. Commit as `github-actions[bot]` and push. No changes means no commit.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from adapters.git_cli import GitCli, repository_url
from core.config import AppSettings
from core.domain.models import EventContext
from core.domain.workflow import DocPublishWorkflow
from core.errors import PublishError

logger = logging.getLogger(__name__)

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "41898282+github-actions[bot]@users.noreply.github.com"


def _clear_worktree(root: Path) -> None:
    for entry in root.iterdir():
        if entry.name == ".git":
            continue
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


class GhPagesPublisher:
    """`Publisher` pushing to `workflow.pages_branch` of the event's repository."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        workflow: DocPublishWorkflow | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._workflow = workflow or DocPublishWorkflow()
        self._git = GitCli(self._settings, PublishError)

    def _prepare(self, url: str, branch: str, worktree: Path) -> None:
        heads = self._git(["ls-remote", "--heads", url, branch], authenticated=True)
        if heads.stdout.strip():
            logger.info("cloning %s", branch)
            self._git(
                ["clone", "--quiet", "--depth=1", "--single-branch", "--branch", branch, url, str(worktree)],
                authenticated=True,
            )
            return

        logger.info("branch %s does not exist yet, starting an orphan branch", branch)
        worktree.mkdir(parents=True, exist_ok=True)
        self._git(["init", "--quiet"], cwd=worktree)
        self._git(["symbolic-ref", "HEAD", f"refs/heads/{branch}"], cwd=worktree)
        self._git(["remote", "add", "origin", url], cwd=worktree)

    def publish(self, source_dir: Path, event: EventContext) -> str | None:
        workflow = self._workflow
        if self._settings.token_value() is None:
            raise PublishError("no token configured (GITHUB_TOKEN / DOCPUB_GITHUB_TOKEN)")
        if not event.repository:
            raise PublishError("event names no repository to publish to")
        if not source_dir.is_dir():
            raise PublishError(f"publish dir does not exist: {source_dir}")

        url = repository_url(self._settings.github_server_url, event.repository)
        branch = workflow.pages_branch

        with tempfile.TemporaryDirectory(prefix="docpub-") as tmp:
            worktree = Path(tmp) / "pages"
            self._prepare(url, branch, worktree)

            if not workflow.keep_files:
                _clear_worktree(worktree)
            shutil.copytree(source_dir, worktree, dirs_exist_ok=True)
            if not workflow.enable_jekyll:
                (worktree / ".nojekyll").touch()
            if workflow.cname:
                (worktree / "CNAME").write_text(workflow.cname.strip() + "\n", encoding="utf-8")

            self._git(["add", "--all"], cwd=worktree)
            status = self._git(["status", "--porcelain"], cwd=worktree)
            if not status.stdout.strip():
                logger.info("%s already up to date", branch)
                return f"{branch} already up to date"

            message = workflow.commit_message.format(sha=event.sha or "unknown")
            self._git(
                ["commit", "--quiet", "-m", message],
                cwd=worktree,
                config=(f"user.name={BOT_NAME}", f"user.email={BOT_EMAIL}"),
            )
            self._git(
                ["push", "--quiet", "origin", f"HEAD:refs/heads/{branch}"],
                cwd=worktree,
                authenticated=True,
            )

        logger.info("published %s to %s", workflow.publish_dir, branch)
        return f"pushed {workflow.publish_dir} to {branch}"
