"""Error taxonomy for the pagination pipeline.

Every error can carry the :class:`AccumulatedResult` gathered before the
failure in ``partial``, so callers never lose data that was already fetched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from collector.pagination.models import AccumulatedResult

_BODY_PREVIEW = 200


class CollectorError(Exception):
    """Base class for all pipeline errors."""

    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.partial: Optional[AccumulatedResult] = None


class InvalidInput(CollectorError):
    """Malformed caller arguments; raised before any network activity."""


class NetworkError(CollectorError):
    """Connection-level failure: timeout, DNS, refused connection."""

    retryable = True

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class RemoteError(CollectorError):
    """The endpoint answered with a non-success status code."""

    retryable = True

    def __init__(self, status_code: int, url: str = "", body: str = "") -> None:
        super().__init__(f"HTTP {status_code} from {url or '(unknown url)'}")
        self.status_code = status_code
        self.url = url
        self.body = body[:_BODY_PREVIEW]

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class MalformedResponse(CollectorError):
    """The response body does not have the expected shape."""
