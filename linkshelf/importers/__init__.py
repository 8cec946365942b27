"""Bulk import sources that feed the link store."""

from linkshelf.importers.base import HttpImportSource, ImportSource
from linkshelf.importers.github import GitHubImportSource
from linkshelf.importers.service import ImportResult, ImportService
from linkshelf.importers.vercel import VercelImportSource

__all__ = [
    "GitHubImportSource",
    "HttpImportSource",
    "ImportResult",
    "ImportService",
    "ImportSource",
    "VercelImportSource",
]
