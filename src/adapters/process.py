"""Thin wrapper around `subprocess.run` shared by every command-line adapter.

- Blocking, captured output, text mode.
- Known secrets are masked in the logged command line and in the output kept
  for error messages.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)

_MASK = "***"
_TAIL_LINES = 20


def redact(text: str, secrets: Iterable[str | None]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, _MASK)
    return text


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self) -> str:
        """Last lines of stderr (or stdout when stderr is empty)."""

        text = self.stderr.strip() or self.stdout.strip()
        return "\n".join(text.splitlines()[-_TAIL_LINES:])


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    secrets: Iterable[str | None] = (),
) -> CommandResult:
    """Run a command to completion.

    `env` is merged on top of the current process environment. Raises
    `OSError` when the executable cannot be started and
    `subprocess.TimeoutExpired` on timeout; a non-zero exit is reported
    through `CommandResult.returncode`, not raised.
    """

    secrets = [s for s in secrets if s]
    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    logger.debug("running %s", redact(" ".join(args), secrets))
    completed = subprocess.run(
        list(args),
        cwd=str(cwd) if cwd is not None else None,
        env=full_env,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )
    return CommandResult(
        args=[redact(a, secrets) for a in args],
        returncode=completed.returncode,
        stdout=redact(completed.stdout or "", secrets),
        stderr=redact(completed.stderr or "", secrets),
    )
