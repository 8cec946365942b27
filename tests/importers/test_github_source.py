"""Tests for the GitHub import source."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from linkshelf.config import GitHubImportConfig
from linkshelf.errors import ImportSourceFailure
from linkshelf.importers.github import GitHubImportSource, repo_to_candidate


def _response(payload: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.headers = headers or {}
    return response


def _repo(name: str, **extra: Any) -> dict[str, Any]:
    repo = {
        "name": name,
        "html_url": f"https://github.com/octocat/{name}",
        "homepage": None,
        "description": None,
        "language": None,
        "stargazers_count": 0,
        "fork": False,
    }
    repo.update(extra)
    return repo


@pytest.fixture
def source() -> GitHubImportSource:
    return GitHubImportSource("octocat", max_retries=2, retry_delay=0)


@patch("linkshelf.importers.base.requests.Session.get")
def test_fetch_all_pages_until_short_page(mock_get: Mock, source: GitHubImportSource) -> None:
    full_page = [_repo(f"repo{i}") for i in range(100)]
    mock_get.side_effect = [_response(full_page), _response([_repo("last")])]

    repos = source.fetch_all()

    assert len(repos) == 101
    assert mock_get.call_count == 2
    first_params = mock_get.call_args_list[0].kwargs["params"]
    second_params = mock_get.call_args_list[1].kwargs["params"]
    assert first_params == {"per_page": 100, "page": 1, "sort": "updated"}
    assert second_params["page"] == 2
    assert mock_get.call_args_list[0].args[0] == "https://api.github.com/users/octocat/repos"


@patch("linkshelf.importers.base.requests.Session.get")
def test_fetch_all_stops_on_empty_page(mock_get: Mock, source: GitHubImportSource) -> None:
    mock_get.side_effect = [_response([])]
    assert source.fetch_all() == []


@patch("linkshelf.importers.base.requests.Session.get")
def test_unknown_user_raises_failure(mock_get: Mock, source: GitHubImportSource) -> None:
    mock_get.return_value = _response({"message": "Not Found"}, status_code=404)

    with pytest.raises(ImportSourceFailure, match="not found") as excinfo:
        source.fetch_all()

    assert excinfo.value.status_code == 404
    assert mock_get.call_count == 1


@patch("linkshelf.importers.base.requests.Session.get")
def test_rate_limit_is_reported(mock_get: Mock, source: GitHubImportSource) -> None:
    mock_get.return_value = _response({}, status_code=403, headers={"X-RateLimit-Remaining": "0"})

    with pytest.raises(ImportSourceFailure, match="rate limit"):
        source.fetch_all()


@patch("linkshelf.importers.base.requests.Session.get")
def test_network_errors_are_retried_then_raised(mock_get: Mock, source: GitHubImportSource) -> None:
    mock_get.side_effect = requests.ConnectionError("boom")

    with pytest.raises(ImportSourceFailure, match="unreachable"):
        source.fetch_all()

    assert mock_get.call_count == 2


@patch("linkshelf.importers.base.requests.Session.get")
def test_server_error_then_success(mock_get: Mock, source: GitHubImportSource) -> None:
    mock_get.side_effect = [_response({}, status_code=502), _response([_repo("only")])]

    assert [repo["name"] for repo in source.fetch_all()] == ["only"]


def test_repo_to_candidate_prefers_homepage() -> None:
    candidate = repo_to_candidate(
        _repo(
            "site",
            homepage="https://site.dev",
            description="My site",
            language="Python",
            stargazers_count=12,
        )
    )

    assert candidate.title == "site"
    assert candidate.url == "https://site.dev"
    assert candidate.description == "My site | Language: Python | ⭐ 12"
    assert candidate.version is None


def test_repo_to_candidate_falls_back_to_repo_page() -> None:
    candidate = repo_to_candidate(_repo("tool", homepage=""))

    assert candidate.url == "https://github.com/octocat/tool"
    assert candidate.description == "GitHub repository: tool"


def test_normalize_filters_forks_and_excluded_and_sorts_by_stars() -> None:
    source = GitHubImportSource("octocat", exclude_repo="linkshelf")
    records = [
        _repo("small", stargazers_count=1),
        _repo("forked", fork=True, stargazers_count=99),
        _repo("linkshelf", stargazers_count=50),
        _repo("big", stargazers_count=40),
        _repo("tie", stargazers_count=1),
    ]

    candidates = source.normalize(records)

    assert [candidate.title for candidate in candidates] == ["big", "small", "tie"]


def test_normalize_can_include_forks() -> None:
    source = GitHubImportSource("octocat", include_forks=True)
    assert [c.title for c in source.normalize([_repo("forked", fork=True)])] == ["forked"]


def test_from_config_resolves_env_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GH_TEST_TOKEN", "secret")
    config = GitHubImportConfig(username="octocat", token="env:GH_TEST_TOKEN", max_retries=5)

    source = GitHubImportSource.from_config(config)

    assert source.username == "octocat"
    assert source.max_retries == 5
    assert source.session.headers["Authorization"] == "Bearer secret"


def test_from_config_requires_username() -> None:
    with pytest.raises(ValueError, match="username"):
        GitHubImportSource.from_config(GitHubImportConfig())


@pytest.mark.parametrize(
    "records",
    [
        [_repo("ok"), _repo("bad", stargazers_count="lots")],
        [_repo("ok"), "not-a-repo"],
    ],
)
def test_normalize_rejects_malformed_records(records: list[Any]) -> None:
    source = GitHubImportSource("octocat")

    with pytest.raises(ImportSourceFailure, match="malformed") as excinfo:
        source.normalize(records)

    assert excinfo.value.source == "github"
