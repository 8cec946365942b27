"""Import a GitHub user's public repositories as links."""

from __future__ import annotations

from typing import Any, Sequence

import requests
from loguru import logger

from linkshelf.config.importers import GitHubImportConfig
from linkshelf.config.utils import resolve_env_reference
from linkshelf.errors import ImportSourceFailure
from linkshelf.store.models import Candidate

from .base import HttpImportSource, RawRecord


def repo_to_candidate(repo: RawRecord) -> Candidate:
    """Map one repository record onto a :class:`Candidate`.

    The project homepage is preferred over the repository page when set.
    Language and star count are appended to the description.
    """
    name = str(repo.get("name") or "").strip()
    homepage = str(repo.get("homepage") or "").strip()
    url = homepage or str(repo.get("html_url") or "").strip()

    description = str(repo.get("description") or "").strip() or f"GitHub repository: {name}"
    language = repo.get("language")
    if language:
        description += f" | Language: {language}"
    stars = int(repo.get("stargazers_count") or 0)
    if stars > 0:
        description += f" | ⭐ {stars}"

    return Candidate(title=name, url=url, description=description)


class GitHubImportSource(HttpImportSource):
    """Pages through ``/users/{username}/repos`` on the GitHub REST API."""

    name = "github"

    def __init__(
        self,
        username: str,
        *,
        token: str | None = None,
        exclude_repo: str | None = None,
        include_forks: bool = False,
        api_base_url: str = "https://api.github.com",
        **http_options: Any,
    ) -> None:
        super().__init__(**http_options)
        username = username.strip()
        if not username:
            raise ValueError("GitHub username is required")
        self.username = username
        self.exclude_repo = exclude_repo
        self.include_forks = include_forks
        self.api_base_url = api_base_url.rstrip("/")
        self.session.headers.update({"Accept": "application/vnd.github+json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    @classmethod
    def from_config(
        cls,
        config: GitHubImportConfig,
        *,
        username: str | None = None,
        token: str | None = None,
    ) -> "GitHubImportSource":
        """Build a source from config; explicit arguments win over config values."""
        resolved_user = username or config.username
        if not resolved_user:
            raise ValueError("GitHub username is required (pass --user or set github.username)")
        return cls(
            resolved_user,
            token=token or resolve_env_reference(config.token, required=False),
            exclude_repo=config.exclude_repo,
            include_forks=config.include_forks,
            api_base_url=config.api_base_url,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            timeout=config.timeout,
        )

    def fetch_all(self) -> list[RawRecord]:
        url = f"{self.api_base_url}/users/{self.username}/repos"
        repos: list[RawRecord] = []
        page = 1

        while True:
            data = self._get_json(
                url,
                params={"per_page": self.page_size, "page": page, "sort": "updated"},
            )
            if not isinstance(data, list):
                raise ImportSourceFailure(self.name, "GitHub API returned an unexpected payload")
            if not data:
                break

            repos.extend(data)
            logger.debug("Fetched GitHub page {} ({} repos, {} total)", page, len(data), len(repos))
            if len(data) < self.page_size:
                break
            page += 1

        logger.info("Fetched {} repositories for GitHub user {}", len(repos), self.username)
        return repos

    def normalize(self, records: Sequence[RawRecord]) -> list[Candidate]:
        try:
            kept = [
                repo
                for repo in records
                if repo.get("name") != self.exclude_repo
                and (self.include_forks or not repo.get("fork"))
            ]
            kept.sort(key=lambda repo: int(repo.get("stargazers_count") or 0), reverse=True)
            candidates = [repo_to_candidate(repo) for repo in kept]
        except (AttributeError, LookupError, TypeError, ValueError) as exc:
            raise ImportSourceFailure(self.name, f"GitHub API returned a malformed repository: {exc}") from exc
        return [candidate for candidate in candidates if candidate.url]

    def _http_failure(self, response: requests.Response) -> ImportSourceFailure:
        status = response.status_code
        if status == 404:
            message = f"GitHub user '{self.username}' not found"
        elif status == 401:
            message = "GitHub token is invalid"
        elif status == 429 or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"):
            message = "GitHub API rate limit exceeded; try again later or configure a token"
        else:
            message = f"GitHub API error: {status}"
        return ImportSourceFailure(self.name, message, status_code=status)


__all__ = ["GitHubImportSource", "repo_to_candidate"]
