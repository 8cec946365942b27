"""Link store, persistence adapters and reconciliation."""

from linkshelf.store.models import Candidate, Link, LinkInput, ReconcileResult, SessionState
from linkshelf.store.render import NullRenderer, Renderer
from linkshelf.store.service import LinkStore
from linkshelf.store.storage import JsonFileStorage, LinkStorage, MemoryStorage
from linkshelf.store.versioning import DEFAULT_VERSION, increment_version

__all__ = [
    "Candidate",
    "DEFAULT_VERSION",
    "JsonFileStorage",
    "Link",
    "LinkInput",
    "LinkStorage",
    "LinkStore",
    "MemoryStorage",
    "NullRenderer",
    "ReconcileResult",
    "Renderer",
    "SessionState",
    "increment_version",
]
