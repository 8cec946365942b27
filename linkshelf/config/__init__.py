"""Configuration namespace for linkshelf."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .importers import GitHubImportConfig, VercelImportConfig
from .storage import StorageConfig
from .utils import resolve_env_reference
from .web import WebAuthConfig, WebConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "GitHubImportConfig",
    "VercelImportConfig",
    "StorageConfig",
    "WebAuthConfig",
    "WebConfig",
    "resolve_env_reference",
]
