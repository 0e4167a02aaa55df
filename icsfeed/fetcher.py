import logging
from typing import Dict, List, Optional, Protocol

import httpx
from pydantic import BaseModel

from .errors import FetchFailure

logger = logging.getLogger(__name__)


class FetchResult(BaseModel):
    text: str
    status: int

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchResult:
        ...


class HttpxFetcher:
    """Blocking HTTP fetcher backed by httpx."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            headers=headers or {},
        )

    def fetch(self, url: str) -> FetchResult:
        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise FetchFailure(f"Failed to fetch {url}: {exc}") from exc
        logger.debug("GET %s -> %s", url, response.status_code)
        return FetchResult(text=response.text, status=response.status_code)

    def close(self) -> None:
        self._client.close()


class StaticFetcher:
    """In-memory stand-in for remote documents, keyed by URL."""

    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages: Dict[str, str] = dict(pages or {})
        self.statuses: Dict[str, int] = {}
        self.requested: List[str] = []

    def add(self, url: str, text: str, status: int = 200) -> None:
        self.pages[url] = text
        self.statuses[url] = status

    def fetch(self, url: str) -> FetchResult:
        self.requested.append(url)
        if url not in self.pages:
            raise FetchFailure(f"Failed to fetch {url}: unknown document")
        return FetchResult(text=self.pages[url], status=self.statuses.get(url, 200))


def fetch_document(fetcher: Fetcher, url: str) -> str:
    """Fetch ``url`` and return its body, treating non-2xx as a failure."""
    result = fetcher.fetch(url)
    if not result.ok:
        raise FetchFailure(
            f"Failed to fetch {url}: HTTP {result.status}", status_code=result.status
        )
    return result.text
