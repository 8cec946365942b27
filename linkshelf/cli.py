"""Command line interface for the linkshelf link manager."""

from __future__ import annotations

import contextlib
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import click
import typer
import uvicorn
from loguru import logger

from .config import AppConfig, GitHubImportConfig, VercelImportConfig, load_config
from .config.inspector import check_config, explain_config
from .errors import ValidationError
from .importers import GitHubImportSource, ImportService, VercelImportSource
from .importers.base import ImportSource
from .store import JsonFileStorage, Link, LinkInput, LinkStore, SessionState
from .web import create_app

DEFAULT_CONFIG_NAME = "linkshelf.toml"

_LOG_HANDLER_ID: int | None = None


class TableRenderer:
    """Keeps the latest snapshot and prints it once the command is done."""

    def __init__(self) -> None:
        self.snapshot: list[Link] | None = None

    def render(self, links: Sequence[Link]) -> None:
        self.snapshot = list(links)

    def flush(self) -> None:
        if self.snapshot is None:
            return
        typer.echo(format_table(self.snapshot))
        self.snapshot = None


def format_table(links: Sequence[Link]) -> str:
    if not links:
        return "(no links)"
    lines = []
    for link in links:
        lines.append(f"{link.order:>4}  {link.id}  {link.title}  <{link.url}>  v{link.version}")
        if link.description:
            lines.append(f"      {link.description}")
    return "\n".join(lines)


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    data_dir: Path | None = None
    session: SessionState = field(default_factory=SessionState)
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if self.config_path.exists():
                logger.info("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
            elif self.config_path.name == DEFAULT_CONFIG_NAME:
                logger.debug("No {} found; using default configuration", self.config_path)
                self._config = AppConfig()
            else:
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
            _configure_logging(self._config.logging_level)
        return self._config

    def storage_path(self) -> Path:
        config = self.ensure_config()
        if self.data_dir is not None:
            return self.data_dir.resolve() / config.storage.filename
        return config.storage_path(self.config_path.parent)

    def open_store(self, renderer: TableRenderer | None = None) -> LinkStore:
        store = LinkStore(JsonFileStorage(self.storage_path()), renderer=renderer)
        store.init()
        return store


app = typer.Typer(help="Manage a local, ordered collection of links")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")
import_app = typer.Typer(help="Bulk-import links from hosting providers")
app.add_typer(import_app, name="import")


def _configure_logging(level: str) -> None:
    global _LOG_HANDLER_ID
    if _LOG_HANDLER_ID is not None:
        logger.remove(_LOG_HANDLER_ID)
    else:
        # Drop loguru's built-in stderr sink so the configured level applies.
        with contextlib.suppress(ValueError):
            logger.remove(0)
    _LOG_HANDLER_ID = logger.add(sys.stderr, level=level)


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _load_state_config(state: CLIState) -> AppConfig:
    try:
        return state.ensure_config()
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Cannot load configuration: {}", exc)
        _exit(2)
        raise  # pragma: no cover - _exit always raises


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME),
        help="Path to the TOML configuration file",
    ),
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        help="Override the directory holding the link collection",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve(), data_dir=data_dir)

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'list' or 'status'.")
        _exit(0)


@app.command("list", help="Show all links in display order")
def list_links(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format: text or json",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    _load_state_config(state)
    renderer = TableRenderer()
    store = state.open_store(renderer)

    if format == "json":
        typer.echo(json.dumps([link.to_record() for link in store.list()], indent=2, ensure_ascii=False))
        return
    renderer.flush()


@app.command(help="Add a link at the end of the collection")
def add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Display title"),
    url: str = typer.Argument(..., help="Target URL"),
    description: str = typer.Option("", "--description", "-d", help="Optional description"),
    version: str | None = typer.Option(None, "--version", help="Version string (default 1.0.0)"),
) -> None:
    state = _get_state(ctx)
    _load_state_config(state)
    renderer = TableRenderer()
    store = state.open_store(renderer)

    try:
        link = store.add(LinkInput(title=title, url=url, description=description, version=version))
    except ValidationError as exc:
        logger.error("Cannot add link: {}", exc.message)
        _exit(1)
        return

    logger.info("Added link {} ({})", link.id, link.url)
    renderer.flush()


@app.command(help="Edit a link; without field options every field is prompted for")
def edit(
    ctx: typer.Context,
    link_id: str = typer.Argument(..., help="Id of the link to edit"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    url: str | None = typer.Option(None, "--url", help="New URL"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    version: str | None = typer.Option(None, "--version", help="New version string"),
) -> None:
    state = _get_state(ctx)
    _load_state_config(state)
    renderer = TableRenderer()
    store = state.open_store(renderer)

    session = state.session
    session.begin_edit(link_id)
    try:
        data = _edit_form(store, session, title=title, url=url, description=description, version=version)
        if data is None:
            logger.error("Link {} not found", link_id)
            _exit(1)
            return
        store.update(link_id, data)
    except ValidationError as exc:
        logger.error("Cannot update link: {}", exc.message)
        _exit(1)
        return
    finally:
        session.clear()

    logger.info("Updated link {}", link_id)
    renderer.flush()


def _edit_form(
    store: LinkStore,
    session: SessionState,
    *,
    title: str | None,
    url: str | None,
    description: str | None,
    version: str | None,
) -> LinkInput | None:
    """Field values for the link in ``session.editing_id``; ``None`` if it is gone.

    Omitted options keep the current value. When no option is given at all
    each field is prompted for, pre-filled with the current value.
    """
    current = store.get(session.editing_id) if session.editing_id else None
    if current is None:
        return None

    if all(value is None for value in (title, url, description, version)):
        title = typer.prompt("Title", default=current.title)
        url = typer.prompt("URL", default=current.url)
        description = typer.prompt("Description", default=current.description, show_default=False)
        version = typer.prompt("Version", default=current.version)

    return LinkInput(
        title=title if title is not None else current.title,
        url=url if url is not None else current.url,
        description=description if description is not None else current.description,
        version=version,
    )


@app.command(help="Delete a link")
def delete(
    ctx: typer.Context,
    link_id: str = typer.Argument(..., help="Id of the link to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    state = _get_state(ctx)
    _load_state_config(state)
    renderer = TableRenderer()
    store = state.open_store(renderer)

    session = state.session
    session.begin_delete(link_id)
    try:
        if not yes:
            _confirm_delete(store, session)
        removed = store.delete(link_id)
    finally:
        session.clear()

    if removed:
        logger.info("Deleted link {}", link_id)
    else:
        logger.warning("Link {} not found; nothing deleted", link_id)
    renderer.flush()


def _confirm_delete(store: LinkStore, session: SessionState) -> None:
    """Ask before deleting ``session.deleting_id``; declining raises :class:`click.Abort`."""
    link = store.get(session.deleting_id) if session.deleting_id else None
    if link is None:
        return
    typer.confirm(f"Delete '{link.title}' <{link.url}>?", abort=True)


@app.command(help="Move a link into the position of another")
def move(
    ctx: typer.Context,
    dragged_id: str = typer.Argument(..., help="Id of the link to move"),
    target_id: str = typer.Argument(..., help="Id of the link whose position it takes"),
) -> None:
    state = _get_state(ctx)
    _load_state_config(state)
    renderer = TableRenderer()
    store = state.open_store(renderer)

    if not store.reorder(dragged_id, target_id):
        logger.warning("Nothing moved; check that both ids exist and differ")
        _exit(1)
        return
    renderer.flush()


def _run_import(state: CLIState, source: ImportSource) -> None:
    store = state.open_store()
    result = ImportService(store).run(source)
    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if not result.success:
        _exit(1)


@import_app.command("github", help="Import public repositories of a GitHub user")
def import_github(
    ctx: typer.Context,
    user: str | None = typer.Option(None, "--user", help="GitHub username (defaults to github.username)"),
    token: str | None = typer.Option(None, "--token", help="API token to raise the rate limit"),
) -> None:
    state = _get_state(ctx)
    config = _load_state_config(state)
    github_cfg = config.github or GitHubImportConfig()

    try:
        source = GitHubImportSource.from_config(github_cfg, username=user, token=token)
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot start GitHub import: {}", exc)
        _exit(1)
        return
    _run_import(state, source)


@import_app.command("vercel", help="Import deployed projects of a Vercel account")
def import_vercel(
    ctx: typer.Context,
    token: str | None = typer.Option(None, "--token", help="Vercel API token (defaults to vercel.token)"),
) -> None:
    state = _get_state(ctx)
    config = _load_state_config(state)
    vercel_cfg = config.vercel or VercelImportConfig()

    try:
        source = VercelImportSource.from_config(vercel_cfg, token=token)
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot start Vercel import: {}", exc)
        _exit(1)
        return
    _run_import(state, source)


@app.command(help="Run the local JSON API server")
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Host to bind (defaults to web.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to web.port)"),
    dry_run: bool = typer.Option(False, help="Load the store and report without starting the server"),
) -> None:
    state = _get_state(ctx)
    config = _load_state_config(state)
    store = state.open_store()

    bind_host = host or (config.web.host if config.web else "127.0.0.1")
    bind_port = port or (config.web.port if config.web else 8000)

    if dry_run:
        logger.info("[Dry Run] Would serve {} links on {}:{}", len(store), bind_host, bind_port)
        return

    try:
        app_instance = create_app(store, config)
    except EnvironmentError as exc:
        logger.error("Cannot start API server: {}", exc)
        _exit(1)
        return
    uvicorn.run(app_instance, host=bind_host, port=bind_port)


@app.command(help="Show configuration and collection status")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_state_config(state)
    _report_status(state, config)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format: text or json",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    else:
        _log_check_result(result)
    _exit(exit_code)


def _log_check_result(result: dict[str, Any]) -> None:
    path = result["config_path"]
    if result["status"] == "ok":
        logger.info("{} is valid", path)
        for warning in result["warnings"]:
            logger.warning("{}", warning)
        return

    error: dict[str, Any] = result["error"]
    logger.error("{} is invalid ({}): {}", path, error["type"], error["message"])
    for detail in error.get("details", []):
        logger.error("  {} -> {}", detail["loc"] or "<root>", detail["message"])


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format: text or json",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        typer.echo(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    for item in fields:
        marker = "*" if item["required"] else " "
        default = json.dumps(item["default"], ensure_ascii=False, default=str)
        typer.echo(f"{marker} {item['name']:<28} {item['type']:<32} default={default}")
        if item["description"]:
            typer.echo(f"    {item['description']}")


def _report_status(state: CLIState, config: AppConfig) -> None:
    storage_path = state.storage_path()
    logger.info("=== Linkshelf Status ===")
    logger.info("Config file: {} (exists={})", state.config_path, state.config_path.exists())
    logger.info("Logging level: {}", config.logging_level)
    logger.info("Link file: {} (exists={})", storage_path, storage_path.exists())

    store = state.open_store()
    logger.info("Links: {}", len(store))

    logger.info("\n=== Import Sources ===")
    if config.github:
        logger.info("GitHub user: {}", config.github.username or "(not set)")
        logger.info("GitHub token: {}", "configured" if config.github.token else "none")
    else:
        logger.info("GitHub: not configured")
    if config.vercel:
        logger.info("Vercel token: {}", "configured" if config.vercel.token else "none")
    else:
        logger.info("Vercel: not configured")

    logger.info("\n=== API Server ===")
    if config.web:
        logger.info("Bind: {}:{}", config.web.host, config.web.port)
        logger.info("Auth: {}", "enabled" if config.web.auth and config.web.auth.enabled else "disabled")
    else:
        logger.info("Not configured (defaults to 127.0.0.1:8000)")


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    except click.exceptions.Abort:
        typer.echo("Aborted.", err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
