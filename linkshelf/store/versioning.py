"""Helpers for the ``major.minor.patch`` version strings carried by links."""

from __future__ import annotations

import re

DEFAULT_VERSION = "1.0.0"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_component(raw: str) -> int:
    # Leading digits win ("3beta" -> 3); anything else counts as zero.
    match = _LEADING_INT.match(raw)
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def parse_version(version: str | None) -> list[int]:
    """Split ``version`` into integer components, padded to three."""
    parts = [_parse_component(piece) for piece in (version or "").split(".")]
    while len(parts) < 3:
        parts.append(0)
    return parts


def increment_version(version: str | None) -> str:
    """Return ``version`` with its patch component bumped by one.

    >>> increment_version("1.2.3")
    '1.2.4'
    >>> increment_version("bad")
    '0.0.1'
    """
    parts = parse_version(version)
    parts[2] += 1
    return ".".join(str(part) for part in parts)


__all__ = ["DEFAULT_VERSION", "increment_version", "parse_version"]
