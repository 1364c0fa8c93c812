"""Toolchain step: rustup.

Mirrors what the usual toolchain action does on a CI runner:
`rustup toolchain install <name> --profile minimal --no-self-update`, then
makes it the default. Extra targets/components come from the workflow.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from adapters.process import run_command
from core.config import AppSettings
from core.errors import ToolchainInstallError

logger = logging.getLogger(__name__)


class RustupToolchain:
    """`ToolchainInstaller` backed by rustup."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        targets: Sequence[str] = (),
        components: Sequence[str] = (),
    ) -> None:
        self._settings = settings or AppSettings()
        self._targets = list(targets)
        self._components = list(components)

    def _rustup(self, args: list[str]) -> str:
        cmd = [self._settings.rustup_executable, *args]
        try:
            result = run_command(cmd, timeout=self._settings.command_timeout_seconds)
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ToolchainInstallError(f"rustup could not run: {exc}") from exc
        if not result.ok:
            raise ToolchainInstallError(
                f"rustup {' '.join(args)} failed ({result.returncode}): {result.tail()}"
            )
        return result.stdout

    def install(self, toolchain: str) -> str | None:
        args = ["toolchain", "install", toolchain, "--profile", "minimal", "--no-self-update"]
        for target in self._targets:
            args += ["--target", target]
        for component in self._components:
            args += ["--component", component]

        logger.info("installing toolchain %s", toolchain)
        self._rustup(args)
        self._rustup(["default", toolchain])

        version = self._rustup(["run", toolchain, "rustc", "--version"]).strip()
        return version or toolchain
