"""Build step: run the opaque documentation script.

The script is called with no arguments from the workspace root. Its contract
is only its exit status; what it writes under the publish dir is not checked.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from adapters.process import run_command
from core.config import AppSettings
from core.errors import BuildScriptError

logger = logging.getLogger(__name__)


class ScriptBuildRunner:
    """`BuildRunner` executing a script path relative to the workspace."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def run(self, script: str, workspace: Path, env: dict[str, str]) -> str | None:
        script_path = workspace / script
        if not script_path.is_file():
            raise BuildScriptError(f"build script not found: {script}")
        if not os.access(script_path, os.X_OK):
            raise BuildScriptError(f"build script is not executable: {script}")

        logger.info("running %s", script)
        try:
            result = run_command(
                [str(script_path.resolve())],
                cwd=workspace,
                env=env,
                timeout=self._settings.command_timeout_seconds,
                secrets=(self._settings.token_value(),),
            )
        except subprocess.TimeoutExpired as exc:
            raise BuildScriptError(f"{script} timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise BuildScriptError(f"{script} could not start: {exc}") from exc

        for line in result.stdout.splitlines():
            logger.debug("%s: %s", script, line)

        if not result.ok:
            raise BuildScriptError(
                f"{script} exited with status {result.returncode}: {result.tail()}",
                exit_code=result.returncode,
            )
        return f"{script} exited 0"
