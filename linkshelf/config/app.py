"""Application-level configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator

from linkshelf.config.base import BaseConfig
from linkshelf.config.importers import GitHubImportConfig, VercelImportConfig
from linkshelf.config.storage import StorageConfig
from linkshelf.config.web import WebConfig

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    data_dir: Path = Field(Path("./data"), description="Directory holding the link collection")
    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")

    storage: StorageConfig = Field(default_factory=StorageConfig, description="Link file settings")
    github: GitHubImportConfig | None = Field(None, description="GitHub repository import")
    vercel: VercelImportConfig | None = Field(None, description="Vercel project import")
    web: WebConfig | None = Field(None, description="Local JSON API server")

    @field_validator("logging_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown logging level '{value}'")
        return level

    def resolve_data_dir(self, base_path: Path | None = None) -> Path:
        """Return ``data_dir`` as an absolute path, relative to ``base_path`` when given."""
        if self.data_dir.is_absolute():
            return self.data_dir
        root = base_path if base_path is not None else Path.cwd()
        return (root / self.data_dir).resolve()

    def storage_path(self, base_path: Path | None = None) -> Path:
        return self.resolve_data_dir(base_path) / self.storage.filename


__all__ = ["AppConfig"]
