"""Shared helpers for CLI tests."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def write_config(base_dir: Path, body: str = "") -> Path:
    """Write a config file whose link collection lives under ``base_dir/data``."""

    config_file = base_dir / "config.toml"
    config_file.write_text(f'data_dir = "data"\nlogging_level = "INFO"\n{body}', encoding="utf-8")
    return config_file
