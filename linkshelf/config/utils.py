"""Helper utilities for configuration handling."""

from __future__ import annotations

import os

_ENV_PREFIX = "env:"


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Resolve a secret that may point at an environment variable.

    Tokens in the configuration file may be written as ``"env:VAR_NAME"`` so
    they never land in the TOML itself. Plain strings are returned unchanged
    and ``None`` passes through. When ``required`` is ``True`` a missing or
    empty variable raises :class:`EnvironmentError`; otherwise ``None`` is
    returned.
    """

    if value is None:
        return None
    if not value.startswith(_ENV_PREFIX):
        return value

    var_name = value[len(_ENV_PREFIX):].strip()
    resolved = os.getenv(var_name)
    if resolved:
        return resolved
    if required:
        raise EnvironmentError(f"Environment variable '{var_name}' is not set or empty")
    return None


__all__ = ["resolve_env_reference"]
