"""Persistence adapters for the link collection.

The store treats persistence as an opaque blob: ``load`` returns the raw
records in saved order and ``save`` overwrites everything at once.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from linkshelf.errors import PersistenceFailure

Record = dict[str, Any]

DEFAULT_STORAGE_KEY = "app_links"


class LinkStorage(Protocol):
    """Load/save contract used by :class:`~linkshelf.store.service.LinkStore`."""

    def load(self) -> list[Record]:
        ...

    def save(self, records: list[Record]) -> bool:
        ...


class MemoryStorage:
    """Keeps the collection in process memory; nothing touches the disk."""

    def __init__(self, records: list[Record] | None = None) -> None:
        self._records: list[Record] = copy.deepcopy(records) if records else []
        self.save_count = 0

    def load(self) -> list[Record]:
        return copy.deepcopy(self._records)

    def save(self, records: list[Record]) -> bool:
        self._records = copy.deepcopy(records)
        self.save_count += 1
        return True


class JsonFileStorage:
    """Stores the collection as one JSON array, replaced atomically on save."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def in_directory(cls, data_dir: Path, key: str = DEFAULT_STORAGE_KEY) -> "JsonFileStorage":
        return cls(Path(data_dir) / f"{key}.json")

    def load(self) -> list[Record]:
        if not self.path.exists():
            logger.debug("No link file at {}; starting empty", self.path)
            return []

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(f"Cannot read {self.path}: {exc}") from exc

        if not text.strip():
            return []

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceFailure(f"Corrupt link file {self.path}: {exc}") from exc

        if not isinstance(payload, list):
            raise PersistenceFailure(
                f"Link file {self.path} must contain a JSON array, got {type(payload).__name__}"
            )
        return payload

    def save(self, records: list[Record]) -> bool:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.stem}-",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(records, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save {} links to {}: {}", len(records), self.path, exc)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

        logger.debug("Saved {} links to {}", len(records), self.path)
        return True


__all__ = ["DEFAULT_STORAGE_KEY", "JsonFileStorage", "LinkStorage", "MemoryStorage", "Record"]
