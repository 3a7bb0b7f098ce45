"""Fetchers: the network boundary of the pagination pipeline.

The controller only depends on :class:`Fetcher`.  :class:`HttpxFetcher` talks
to a real endpoint through ``httpx``; :class:`FixtureFetcher` serves canned
responses for tests and offline notebooks.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

import httpx

from collector.pagination.errors import NetworkError, RemoteError
from collector.pagination.models import RawResponse, RequestDescriptor

if TYPE_CHECKING:
    from collector.config import Settings


class Fetcher(ABC):
    """Abstract base class for anything that can fetch one page."""

    @abstractmethod
    def fetch(self, request: RequestDescriptor) -> RawResponse:
        """Return the response for *request*.

        Must raise :class:`NetworkError` on connection failures and
        :class:`RemoteError` on non-2xx responses.
        """

    def __call__(self, request: RequestDescriptor) -> RawResponse:
        return self.fetch(request)


# ---------------------------------------------------------------------------
# httpx-backed fetcher
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FetcherConfig:
    """Explicit configuration handed to :class:`HttpxFetcher` at construction."""

    timeout: float = 30.0
    user_agent: str = "Mozilla/5.0 (compatible; collector/0.1)"
    api_key: str = ""
    api_key_param: str = "api-key"
    api_key_header: str = ""

    @classmethod
    def from_settings(cls, settings: "Settings") -> "FetcherConfig":
        return cls(
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            api_key=settings.api_key,
            api_key_param=settings.api_key_param,
            api_key_header=settings.api_key_header,
        )


class HttpxFetcher(Fetcher):
    """Fetch pages with a shared ``httpx.Client``.

    The API key (if any) is attached at send time, either as a header or as a
    query parameter, so it never ends up in a :class:`RequestDescriptor` or in
    printed URLs.  An injected ``client`` gets the same default headers.
    """

    def __init__(self, config: FetcherConfig, client: Optional[httpx.Client] = None) -> None:
        self.config = config
        headers = {"User-Agent": config.user_agent, "Accept": "application/json"}
        if config.api_key and config.api_key_header:
            headers[config.api_key_header] = config.api_key
        if client is None:
            client = httpx.Client(
                headers=headers,
                timeout=config.timeout,
                follow_redirects=True,
            )
        else:
            client.headers.update(headers)
        self._client = client

    def _auth_params(self) -> dict[str, str]:
        if self.config.api_key and not self.config.api_key_header:
            return {self.config.api_key_param: self.config.api_key}
        return {}

    def fetch(self, request: RequestDescriptor) -> RawResponse:
        print(f"[fetch] GET {request.url}")
        url = request.url
        try:
            response = self._client.get(url, params=self._auth_params() or None)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"timed out fetching {url}: {exc}", url=url) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"could not reach {url}: {exc}", url=url) from exc

        if not response.is_success:
            raise RemoteError(response.status_code, url=url, body=response.text)
        return RawResponse(status_code=response.status_code, body=response.content, url=url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxFetcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Fixture fetcher
# ---------------------------------------------------------------------------

Fixture = Union[RawResponse, Mapping[str, Any], list, Exception]


class FixtureFetcher(Fetcher):
    """Serve canned responses keyed by request URL.

    Values may be a :class:`RawResponse` (returned as-is), a JSON-serialisable
    dict or list (wrapped in a 200 response), or an exception instance (raised).
    Unknown URLs answer with :class:`RemoteError` 404.
    """

    def __init__(self, responses: Mapping[Union[str, RequestDescriptor], Fixture]) -> None:
        self._responses = {str(key): value for key, value in responses.items()}
        self.calls: List[RequestDescriptor] = []

    def fetch(self, request: RequestDescriptor) -> RawResponse:
        self.calls.append(request)
        url = request.url
        if url not in self._responses:
            raise RemoteError(404, url=url, body="no fixture for this URL")
        fixture = self._responses[url]
        if isinstance(fixture, Exception):
            raise fixture
        if isinstance(fixture, RawResponse):
            if not 200 <= fixture.status_code < 300:
                body = fixture.body.decode("utf-8", "replace") if isinstance(fixture.body, bytes) else fixture.body
                raise RemoteError(fixture.status_code, url=url, body=body)
            return fixture
        return RawResponse(status_code=200, body=json.dumps(fixture), url=url)
