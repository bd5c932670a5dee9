"""Runtime settings for a series run.

Configuration is loaded from:
- environment variables (GitHub Actions exports most of these for every job)
- and a local `.env` file (if present)

Run *inputs* (title, labels, flags, ...) live in `issue_series.orchestrator.inputs`;
this module only covers credentials, repository context and host wiring.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeriesSettings(BaseSettings):
    """Settings for the series runner.

    Environment variables:
    - GITHUB_TOKEN
    - GITHUB_REPOSITORY (optional, "owner/repo")
    - GITHUB_API_URL    (optional)
    - LOG_LEVEL         (optional)
    - RUNNER_DEBUG      (optional, forces DEBUG logging)
    - GITHUB_ACTIONS    (optional, log as workflow commands)
    - GITHUB_OUTPUT     (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SeriesSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_repository: str = Field(
        default="",
        validation_alias="GITHUB_REPOSITORY",
        description="Repository the series lives in, in the form 'owner/repo'",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    runner_debug: bool = Field(
        default=False,
        validation_alias="RUNNER_DEBUG",
        description="Set by GitHub Actions when step debug logging is enabled",
    )

    github_actions: bool = Field(
        default=False,
        validation_alias="GITHUB_ACTIONS",
        description="Set to 'true' by GitHub Actions; switches logs to workflow commands",
    )

    github_output: Path | None = Field(
        default=None,
        validation_alias="GITHUB_OUTPUT",
        description="File that step outputs are appended to",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> SeriesSettings:
        if not self.github_token.strip():
            raise ValueError("GITHUB_TOKEN is required")
        return self

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the Actions debug switch."""

        if self.runner_debug:
            return "DEBUG"
        return self.log_level
