"""Configuration for the local link collection file."""

from __future__ import annotations

from pydantic import Field, field_validator

from .base import BaseConfig


class StorageConfig(BaseConfig):
    """Where the link collection is persisted."""

    filename: str = Field("app_links.json", description="JSON file (relative to data_dir)")

    @field_validator("filename")
    @classmethod
    def _require_filename(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("storage.filename must not be empty")
        return stripped


__all__ = ["StorageConfig"]
