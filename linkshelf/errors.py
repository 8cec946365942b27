"""Error taxonomy shared by the link store, persistence and import layers."""

from __future__ import annotations


class LinkshelfError(Exception):
    """Base class for all linkshelf errors."""


class ValidationError(LinkshelfError):
    """Raised when link input is rejected before anything is written."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(LinkshelfError):
    """A link id that does not exist in the store."""

    def __init__(self, link_id: str) -> None:
        super().__init__(f"Link '{link_id}' not found.")
        self.link_id = link_id


class PersistenceFailure(LinkshelfError):
    """Loading or saving the link collection failed."""


class ImportSourceFailure(LinkshelfError):
    """An import source could not deliver its records (auth, rate limit, network)."""

    def __init__(self, source: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.message = message
        self.status_code = status_code


__all__ = [
    "LinkshelfError",
    "ValidationError",
    "NotFoundError",
    "PersistenceFailure",
    "ImportSourceFailure",
]
