"""Pagination package — build, fetch, normalize and accumulate API pages."""

from collector.pagination.controller import (
    PaginationController,
    has_more_pages,
    paginate,
    until_empty_page,
)
from collector.pagination.errors import (
    CollectorError,
    InvalidInput,
    MalformedResponse,
    NetworkError,
    RemoteError,
)
from collector.pagination.fetcher import Fetcher, FetcherConfig, FixtureFetcher, HttpxFetcher
from collector.pagination.models import (
    AccumulatedResult,
    PageMetadata,
    RawResponse,
    RequestDescriptor,
    ResponseShape,
    State,
    StopReason,
)
from collector.pagination.normalizer import flatten_record, normalize
from collector.pagination.request_builder import build_request
from collector.pagination.shapes import SHAPES, get_shape

__all__ = [
    "paginate",
    "PaginationController",
    "has_more_pages",
    "until_empty_page",
    "build_request",
    "normalize",
    "flatten_record",
    "Fetcher",
    "FetcherConfig",
    "HttpxFetcher",
    "FixtureFetcher",
    "RequestDescriptor",
    "RawResponse",
    "PageMetadata",
    "ResponseShape",
    "AccumulatedResult",
    "State",
    "StopReason",
    "SHAPES",
    "get_shape",
    "CollectorError",
    "InvalidInput",
    "NetworkError",
    "RemoteError",
    "MalformedResponse",
]
