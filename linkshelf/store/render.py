"""Presentation hook invoked by the store after each successful mutation."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import Link


class Renderer(Protocol):
    """Anything that can redraw the current link snapshot."""

    def render(self, links: Sequence[Link]) -> None:
        ...


class NullRenderer:
    """Renderer that ignores updates (headless use, API server, tests)."""

    def render(self, links: Sequence[Link]) -> None:
        return None


__all__ = ["NullRenderer", "Renderer"]
