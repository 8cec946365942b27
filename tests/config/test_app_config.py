"""Tests for loading the application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from linkshelf.config import AppConfig, BaseConfig, load_config, resolve_env_reference


class ShelfSection(BaseConfig):
    data_dir: Path
    share_publicly: bool


def test_load_config_reads_custom_section(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text(
        """
        data_dir = "./cache"
        share_publicly = true
        """.strip(),
        encoding="utf-8",
    )

    cfg = load_config(ShelfSection, sample)

    assert cfg.data_dir == Path("./cache")
    assert cfg.share_publicly is True


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(ShelfSection, tmp_path / "missing.toml")


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text("data_dir = ", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_config(ShelfSection, sample)


def test_app_config_defaults() -> None:
    cfg = AppConfig()

    assert cfg.data_dir == Path("./data")
    assert cfg.logging_level == "INFO"
    assert cfg.storage.filename == "app_links.json"
    assert cfg.github is None
    assert cfg.vercel is None
    assert cfg.web is None


def test_app_config_example_file() -> None:
    config_path = Path(__file__).resolve().parents[2] / "config" / "example.toml"
    cfg = load_config(AppConfig, config_path)

    assert cfg.github is not None
    assert cfg.github.username == "octocat"
    assert cfg.github.token == "env:GITHUB_TOKEN"
    assert cfg.github.exclude_repo == "linkshelf"
    assert cfg.github.include_forks is False
    assert cfg.vercel is not None
    assert cfg.vercel.max_retries == 3
    assert cfg.web is not None
    assert cfg.web.port == 8000
    assert cfg.web.auth is None


def test_storage_path_is_relative_to_base(tmp_path: Path) -> None:
    cfg = AppConfig(data_dir=Path("store"))
    assert cfg.storage_path(tmp_path) == (tmp_path / "store" / "app_links.json").resolve()

    absolute = AppConfig(data_dir=tmp_path / "abs")
    assert absolute.storage_path(Path("/elsewhere")) == tmp_path / "abs" / "app_links.json"


def test_logging_level_is_normalised() -> None:
    assert AppConfig(logging_level="debug").logging_level == "DEBUG"
    with pytest.raises(ValidationError):
        AppConfig(logging_level="loud")


def test_extra_fields_are_rejected(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text(
        """
        [github]
        username = "octocat"
        unknown_field = "should fail"
        """,
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Extra inputs are not permitted"):
        load_config(AppConfig, sample)


def test_web_auth_requires_token(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text(
        """
        [web.auth]
        enabled = true
        """,
        encoding="utf-8",
    )

    with pytest.raises(ValidationError, match="web.auth.token is required"):
        load_config(AppConfig, sample)


def test_blank_github_username_becomes_none() -> None:
    cfg = AppConfig.model_validate({"github": {"username": "   "}})
    assert cfg.github is not None and cfg.github.username is None


def test_resolve_env_reference(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKSHELF_TEST_SECRET", "value")
    monkeypatch.delenv("LINKSHELF_MISSING", raising=False)

    assert resolve_env_reference("plain") == "plain"
    assert resolve_env_reference(None) is None
    assert resolve_env_reference("env:LINKSHELF_TEST_SECRET") == "value"
    assert resolve_env_reference("env:LINKSHELF_MISSING", required=False) is None
    with pytest.raises(EnvironmentError):
        resolve_env_reference("env:LINKSHELF_MISSING")
