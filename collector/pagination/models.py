"""Data models for the pagination pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import quote, urlencode

# A record is an opaque mapping of field name to JSON value.
JSONValue = Union[str, int, float, bool, None, Dict[str, Any], list]
Record = Dict[str, JSONValue]
ParamValue = Union[str, int, float, bool]


def _render_param(value: ParamValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully described GET request: endpoint, path and query parameters.

    Descriptors compare by value, so two builds from the same inputs are
    interchangeable (useful as fixture keys and for caching).
    """

    base_url: str
    path_segments: Tuple[str, ...] = ()
    query_params: Tuple[Tuple[str, ParamValue], ...] = ()

    @property
    def params(self) -> Dict[str, ParamValue]:
        return dict(self.query_params)

    @property
    def url(self) -> str:
        url = self.base_url.rstrip("/")
        if self.path_segments:
            url += "/" + "/".join(quote(seg, safe="") for seg in self.path_segments)
        if self.query_params:
            url += "?" + urlencode(
                [(key, _render_param(value)) for key, value in self.query_params]
            )
        return url

    def with_param(self, key: str, value: ParamValue) -> "RequestDescriptor":
        """Return a copy with *key* set to *value* (overwriting any existing value)."""
        params = self.params
        params[key] = value
        return replace(self, query_params=tuple(params.items()))

    def __str__(self) -> str:
        return self.url


@dataclass
class RawResponse:
    """The raw HTTP response for a single page fetch."""

    status_code: int
    body: Union[bytes, str]
    url: str = ""


@dataclass(frozen=True)
class PageMetadata:
    """Pagination metadata extracted from one page."""

    current_page: int
    total_pages: Optional[int] = None
    total_records: Optional[int] = None
    page_size: int = 1
    record_count: int = 0

    def __post_init__(self) -> None:
        if self.current_page < 1:
            raise ValueError(f"current_page must be >= 1, got {self.current_page}")
        if self.total_pages is not None and self.total_pages < 0:
            raise ValueError(f"total_pages must be >= 0, got {self.total_pages}")
        if self.total_records is not None and self.total_records < 0:
            raise ValueError(f"total_records must be >= 0, got {self.total_records}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.total_pages and self.current_page > self.total_pages:
            raise ValueError(
                f"current_page {self.current_page} exceeds total_pages {self.total_pages}"
            )


@dataclass(frozen=True)
class ResponseShape:
    """Where a given API keeps its records and pagination metadata.

    All fields are dotted paths into the decoded JSON document
    (e.g. ``"response.results"``).  ``records_field=None`` means the document
    itself is the record list.  A metadata field set to ``None`` is not looked
    up at all.
    """

    records_field: Optional[str] = "records"
    page_field: Optional[str] = "totalPages"
    count_field: Optional[str] = "totalRecords"
    current_page_field: Optional[str] = None
    page_size_field: Optional[str] = None
    separator: str = "."


class State(str, Enum):
    INITIALIZING = "initializing"
    FETCHING = "fetching"
    DONE = "done"


class StopReason(str, Enum):
    COMPLETE = "complete"
    MAX_PAGES = "max_pages"
    MAX_RECORDS = "max_records"
    ERROR = "error"


@dataclass(frozen=True)
class AccumulatedResult:
    """Ordered records gathered by one pagination run, plus how it ended.

    The tuple is fixed once the run finishes, but each record is a plain dict:
    callers that edit records in place change them for every holder of this
    result.
    """

    records: Tuple[Record, ...] = ()
    metadata: Optional[PageMetadata] = None
    pages_fetched: int = 0
    stop_reason: StopReason = StopReason.COMPLETE
    error: Optional[Exception] = field(default=None, compare=False)

    @property
    def complete(self) -> bool:
        return self.stop_reason is StopReason.COMPLETE

    @property
    def bound_reached(self) -> bool:
        return self.stop_reason in (StopReason.MAX_PAGES, StopReason.MAX_RECORDS)

    @property
    def partial(self) -> bool:
        return self.stop_reason is StopReason.ERROR

    def __len__(self) -> int:
        return len(self.records)
