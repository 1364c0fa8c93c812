"""Checkout step: git.

Gets the workspace to the exact triggering commit, with no leftovers from a
previous run:

- `git init` + `origin` remote when the workspace is not a repository yet.
- Shallow `git fetch` of the commit (SHA, else ref, else branch).
- `git checkout --force --detach FETCH_HEAD` then `git clean -ffdx`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.git_cli import GitCli, repository_url
from core.config import AppSettings
from core.domain.models import EventContext
from core.errors import CheckoutError

logger = logging.getLogger(__name__)


class GitCheckout:
    """`RepositoryCheckout` backed by the git CLI."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._git = GitCli(self._settings, CheckoutError)

    def checkout(self, event: EventContext, workspace: Path) -> str | None:
        target = event.sha or event.ref or (f"refs/heads/{event.branch}" if event.branch else None)
        if not target:
            raise CheckoutError("event carries no commit, ref or branch to check out")

        workspace.mkdir(parents=True, exist_ok=True)
        if not (workspace / ".git").exists():
            if not event.repository:
                raise CheckoutError(
                    f"{workspace} is not a git repository and the event names no repository"
                )
            logger.info("initialising repository in %s", workspace)
            self._git(["init", "--quiet"], cwd=workspace)
            self._git(
                [
                    "remote",
                    "add",
                    "origin",
                    repository_url(self._settings.github_server_url, event.repository),
                ],
                cwd=workspace,
            )

        logger.info("fetching %s", target)
        self._git(
            ["fetch", "--no-tags", "--depth=1", "origin", target],
            cwd=workspace,
            authenticated=True,
        )
        self._git(["checkout", "--force", "--detach", "FETCH_HEAD"], cwd=workspace)
        self._git(["clean", "-ffdx"], cwd=workspace)

        head = self._git(["rev-parse", "HEAD"], cwd=workspace).stdout.strip()
        return f"HEAD at {head}"
