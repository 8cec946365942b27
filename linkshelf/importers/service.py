"""Runs an import source end to end against a link store."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import requests
from loguru import logger

from linkshelf.errors import ImportSourceFailure
from linkshelf.store.service import LinkStore

from .base import ImportSource


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of one import run; ``success=False`` carries ``error`` instead of counts."""

    success: bool
    source: str
    total: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ImportService:
    """Fetch every record, normalise, then reconcile once.

    Nothing reaches the store until the full candidate list has been built, so
    a failed or abandoned fetch leaves the collection untouched.
    """

    def __init__(self, store: LinkStore) -> None:
        self.store = store

    def run(self, source: ImportSource) -> ImportResult:
        logger.info("Starting {} import", source.name)
        try:
            records = source.fetch_all()
            candidates = source.normalize(records)
        except ImportSourceFailure as exc:
            logger.error("{} import failed: {}", source.name, exc.message)
            return ImportResult(success=False, source=source.name, error=exc.message)
        except requests.RequestException as exc:
            logger.error("{} import failed: {}", source.name, exc)
            return ImportResult(success=False, source=source.name, error=str(exc))

        result = self.store.batch_reconcile(candidates)
        logger.info(
            "{} import finished: {} candidates, {} added, {} updated",
            source.name,
            len(candidates),
            result.added,
            result.updated,
        )
        return ImportResult(
            success=True,
            source=source.name,
            total=len(candidates),
            added=result.added,
            updated=result.updated,
            skipped=result.skipped,
        )


__all__ = ["ImportResult", "ImportService"]
