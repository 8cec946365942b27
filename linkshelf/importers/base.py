"""Shared plumbing for HTTP-backed import sources."""

from __future__ import annotations

import time
from typing import Any, Mapping, Protocol, Sequence

import requests
from loguru import logger

from linkshelf.errors import ImportSourceFailure
from linkshelf.store.models import Candidate

RawRecord = dict[str, Any]

USER_AGENT = "linkshelf/0.1"


class ImportSource(Protocol):
    """Contract every provider adapter fulfils.

    ``fetch_all`` pages through the remote API and returns every raw record;
    ``normalize`` turns those records into reconciliation candidates. Both may
    raise :class:`~linkshelf.errors.ImportSourceFailure`.
    """

    name: str

    def fetch_all(self) -> list[RawRecord]:
        ...

    def normalize(self, records: Sequence[RawRecord]) -> list[Candidate]:
        ...


class HttpImportSource:
    """Base class holding a :class:`requests.Session` with retry handling."""

    name = "http"
    page_size = 100

    def __init__(
        self,
        *,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 30.0,
    ) -> None:
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _get_json(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``url`` and decode JSON, retrying transport errors and 5xx replies."""
        last_error = "no attempt made"
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                last_error = str(exc)
                logger.warning(
                    "{} request failed (attempt {}/{}): {}",
                    self.name,
                    attempt,
                    self.max_retries,
                    exc,
                )
            else:
                if response.status_code < 400:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise ImportSourceFailure(
                            self.name, f"{self.name} returned a non-JSON response: {exc}"
                        ) from exc
                if response.status_code < 500:
                    raise self._http_failure(response)
                last_error = f"HTTP {response.status_code}"
                logger.warning(
                    "{} server error {} (attempt {}/{})",
                    self.name,
                    response.status_code,
                    attempt,
                    self.max_retries,
                )

            if attempt < self.max_retries:
                time.sleep(self.retry_delay)

        logger.error("{} request to {} failed after {} attempts", self.name, url, self.max_retries)
        raise ImportSourceFailure(self.name, f"{self.name} API unreachable: {last_error}")

    def _http_failure(self, response: requests.Response) -> ImportSourceFailure:
        """Map a 4xx response to a failure; providers override for nicer messages."""
        return ImportSourceFailure(
            self.name,
            f"{self.name} API error: {response.status_code}",
            status_code=response.status_code,
        )


__all__ = ["HttpImportSource", "ImportSource", "RawRecord", "USER_AGENT"]
