"""Core configuration.

- Environment variables are read once, through pydantic-settings, and handed
  to adapters as an `AppSettings` instance.
- The workflow definition itself lives in `core.domain.workflow`; settings
  only point at an optional JSON override (`DOCPUB_WORKFLOW_PATH`).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "docpub"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "docpub"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "docpub"
    return Path.home() / ".config" / "docpub"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Central application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCPUB_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Project first, then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    workspace: Path = Field(
        default_factory=Path.cwd,
        description="Directory holding the repository checkout.",
    )
    workflow_path: Path | None = Field(
        default=None,
        description="JSON file overriding the default workflow definition.",
    )

    github_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DOCPUB_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="Token used for checkout and publish. Never logged.",
    )
    github_server_url: str = Field(
        default="https://github.com",
        min_length=8,
        validation_alias=AliasChoices("DOCPUB_GITHUB_SERVER_URL", "GITHUB_SERVER_URL"),
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        min_length=8,
        validation_alias=AliasChoices("DOCPUB_GITHUB_API_URL", "GITHUB_API_URL"),
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per HTTP request (seconds).",
    )
    user_agent: str = Field(
        default="docpub/0.1",
        min_length=1,
    )

    git_executable: str = Field(default="git", min_length=1)
    rustup_executable: str = Field(default="rustup", min_length=1)
    command_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Upper bound for every external command. None = no limit.",
    )

    def token_value(self) -> str | None:
        if self.github_token is None:
            return None
        value = self.github_token.get_secret_value().strip()
        return value or None
