"""Shared pytest fixtures and path configuration."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from linkshelf.store import LinkStore, MemoryStorage  # noqa: E402


class RecordingRenderer:
    """Counts render calls and keeps the last snapshot."""

    def __init__(self) -> None:
        self.calls = 0
        self.last: list = []

    def render(self, links) -> None:
        self.calls += 1
        self.last = list(links)


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture()
def store(storage: MemoryStorage, renderer: RecordingRenderer) -> LinkStore:
    link_store = LinkStore(storage, renderer=renderer)
    link_store.init()
    return link_store
