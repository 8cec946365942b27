"""Import deployed Vercel projects as links."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

import requests
from loguru import logger

from linkshelf.config.importers import VercelImportConfig
from linkshelf.config.utils import resolve_env_reference
from linkshelf.errors import ImportSourceFailure
from linkshelf.store.models import Candidate

from .base import HttpImportSource, RawRecord


def _parse_timestamp(value: Any) -> datetime | None:
    """Vercel reports epoch milliseconds; ISO strings are accepted as well."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _with_scheme(host_or_url: str) -> str:
    if host_or_url.startswith(("http://", "https://")):
        return host_or_url
    return f"https://{host_or_url}"


def project_url(project: RawRecord) -> str:
    """Custom alias first, then the deployment host, then ``<name>.vercel.app``."""
    aliases = project.get("alias") or []
    if aliases:
        first = aliases[0]
        domain = first.get("domain") if isinstance(first, dict) else first
        if domain:
            return _with_scheme(str(domain))

    deployment = project.get("productionDeployment") or project.get("latestDeployment") or {}
    if deployment.get("url"):
        return _with_scheme(str(deployment["url"]))

    name = project.get("name")
    return f"https://{name}.vercel.app" if name else ""


def project_version(project: RawRecord) -> str | None:
    """Calendar version ``YYYY.MM.DD`` derived from the project's last update."""
    updated = _parse_timestamp(project.get("updatedAt"))
    if updated is None:
        return None
    return updated.strftime("%Y.%m.%d")


def project_to_candidate(project: RawRecord) -> Candidate:
    name = str(project.get("name") or "").strip()
    framework = project.get("framework")
    description = f"Vercel app: {name}"
    if framework:
        description += f" | Framework: {framework}"
    return Candidate(
        title=name,
        url=project_url(project),
        description=description,
        version=project_version(project),
    )


class VercelImportSource(HttpImportSource):
    """Pages through ``/v9/projects`` on the Vercel REST API."""

    name = "vercel"

    def __init__(
        self,
        token: str,
        *,
        api_base_url: str = "https://api.vercel.com",
        **http_options: Any,
    ) -> None:
        super().__init__(**http_options)
        if not token:
            raise ValueError("Vercel API token is required")
        self.api_base_url = api_base_url.rstrip("/")
        self.session.headers.update(
            {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        )

    @classmethod
    def from_config(cls, config: VercelImportConfig, *, token: str | None = None) -> "VercelImportSource":
        resolved = token or resolve_env_reference(config.token, required=False)
        if not resolved:
            raise ValueError("Vercel API token is required (pass --token or set vercel.token)")
        return cls(
            resolved,
            api_base_url=config.api_base_url,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            timeout=config.timeout,
        )

    def fetch_all(self) -> list[RawRecord]:
        url = f"{self.api_base_url}/v9/projects"
        projects: list[RawRecord] = []
        cursor: Any = None

        while True:
            params: dict[str, Any] = {"limit": self.page_size}
            if cursor is not None:
                params["until"] = cursor
            data = self._get_json(url, params=params)
            if not isinstance(data, dict):
                raise ImportSourceFailure(self.name, "Vercel API returned an unexpected payload")

            page = data.get("projects") or []
            if not page:
                break
            projects.extend(page)
            logger.debug("Fetched Vercel page ({} projects, {} total)", len(page), len(projects))

            cursor = (data.get("pagination") or {}).get("next")
            if cursor is None or len(page) < self.page_size:
                break

        logger.info("Fetched {} Vercel projects", len(projects))
        return projects

    def normalize(self, records: Sequence[RawRecord]) -> list[Candidate]:
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        try:
            deployed = [
                project
                for project in records
                if project.get("productionDeployment") or project.get("latestDeployment")
            ]
            deployed.sort(key=lambda project: _parse_timestamp(project.get("updatedAt")) or epoch, reverse=True)
            candidates = [project_to_candidate(project) for project in deployed]
        except (AttributeError, LookupError, TypeError, ValueError, OverflowError, OSError) as exc:
            raise ImportSourceFailure(self.name, f"Vercel API returned a malformed project: {exc}") from exc
        return [candidate for candidate in candidates if candidate.url]

    def _http_failure(self, response: requests.Response) -> ImportSourceFailure:
        status = response.status_code
        if status in (401, 403):
            message = "Vercel API token is invalid or expired"
        elif status == 429:
            message = "Vercel API rate limit exceeded; try again later"
        else:
            message = f"Vercel API error: {status}"
        return ImportSourceFailure(self.name, message, status_code=status)


__all__ = ["VercelImportSource", "project_to_candidate", "project_url", "project_version"]
