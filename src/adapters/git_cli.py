"""Small git CLI runner shared by the checkout and publish steps."""

from __future__ import annotations

import base64
import subprocess
from pathlib import Path
from typing import Sequence

from adapters.process import CommandResult, run_command
from core.config import AppSettings
from core.errors import StepError


def repository_url(server_url: str, repository: str) -> str:
    return f"{server_url.rstrip('/')}/{repository}.git"


def auth_header(token: str) -> str:
    basic = base64.b64encode(f"x-access-token:{token}".encode("utf-8")).decode("ascii")
    return f"AUTHORIZATION: basic {basic}"


class GitCli:
    """Runs git, turning any failure into `error_cls`.

    The token is sent as an HTTP `Authorization` header (`http.extraheader`)
    so it never lands in `.git/config` or in a remote URL.
    """

    def __init__(self, settings: AppSettings, error_cls: type[StepError]) -> None:
        self._settings = settings
        self._error_cls = error_cls
        token = settings.token_value()
        self._header = auth_header(token) if token else None
        self._secrets = (token, self._header)

    def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        authenticated: bool = False,
        config: Sequence[str] = (),
        check: bool = True,
    ) -> CommandResult:
        cmd = [self._settings.git_executable]
        for item in config:
            cmd += ["-c", item]
        if authenticated and self._header:
            cmd += ["-c", f"http.extraheader={self._header}"]
        cmd += list(args)

        try:
            result = run_command(
                cmd,
                cwd=cwd,
                env={"GIT_TERMINAL_PROMPT": "0"},
                timeout=self._settings.command_timeout_seconds,
                secrets=self._secrets,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise self._error_cls(f"git {args[0]} could not run: {exc}") from exc
        if check and not result.ok:
            raise self._error_cls(f"git {args[0]} failed ({result.returncode}): {result.tail()}")
        return result
