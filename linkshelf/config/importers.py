"""Configuration models for the bulk import sources."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import BaseConfig


class _HttpSourceConfig(BaseConfig):
    """Request knobs shared by every HTTP-backed import source."""

    max_retries: int = Field(3, description="Max attempts for failed requests", ge=1)
    retry_delay: float = Field(2.0, description="Delay between retries (seconds)", ge=0)
    timeout: float = Field(30.0, description="Per-request timeout (seconds)", gt=0)


class GitHubImportConfig(_HttpSourceConfig):
    """Import public repositories of a GitHub user."""

    username: str | None = Field(None, description="GitHub user whose repositories are imported")
    token: str | None = Field(
        None,
        description="Optional API token (supports env:VAR) to raise the rate limit",
    )
    exclude_repo: str | None = Field(
        None,
        description="Repository name to leave out of imports (e.g. this project's own repo)",
    )
    include_forks: bool = Field(False, description="Whether forked repositories are imported")
    api_base_url: str = Field("https://api.github.com", description="GitHub REST API base URL")

    @field_validator("username", "exclude_repo")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class VercelImportConfig(_HttpSourceConfig):
    """Import deployed projects of a Vercel account."""

    token: str | None = Field(None, description="Vercel API token (supports env:VAR)")
    api_base_url: str = Field("https://api.vercel.com", description="Vercel REST API base URL")


__all__ = ["GitHubImportConfig", "VercelImportConfig"]
