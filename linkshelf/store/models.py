"""Data models for the link collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .versioning import DEFAULT_VERSION


def utc_now() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def new_link_id() -> str:
    return uuid4().hex


class Link(BaseModel):
    """A named link owned by :class:`~linkshelf.store.service.LinkStore`.

    Timestamps serialise as ``createdAt``/``updatedAt`` so collections written
    by the browser version of the app load without conversion.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    title: str
    url: str
    description: str = ""
    order: int
    version: str = DEFAULT_VERSION
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    def to_record(self) -> dict[str, object]:
        """Serialise for persistence."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True, slots=True)
class LinkInput:
    """User-supplied fields for :meth:`LinkStore.add` and :meth:`LinkStore.update`."""

    title: str
    url: str
    description: str = ""
    version: str | None = None


@dataclass(frozen=True, slots=True)
class Candidate:
    """A normalised import item awaiting reconciliation.

    Every import source maps its raw records onto this shape, so the
    reconciliation step never needs to know where a candidate came from.
    """

    title: str
    url: str
    description: str = ""
    version: str | None = None


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Counts produced by a single reconciliation batch."""

    added: int = 0
    updated: int = 0
    skipped: int = 0

    @property
    def changed(self) -> bool:
        return self.added + self.updated > 0


@dataclass(slots=True)
class SessionState:
    """Per-session UI state: the link being edited and the one pending deletion."""

    editing_id: str | None = None
    deleting_id: str | None = None

    def begin_edit(self, link_id: str) -> None:
        self.editing_id = link_id

    def begin_delete(self, link_id: str) -> None:
        self.deleting_id = link_id

    def clear(self) -> None:
        self.editing_id = None
        self.deleting_id = None


__all__ = [
    "Candidate",
    "Link",
    "LinkInput",
    "ReconcileResult",
    "SessionState",
    "new_link_id",
    "utc_now",
]
