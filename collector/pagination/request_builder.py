"""Request building: base URL + path segments + query parameters."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from collector.pagination.errors import InvalidInput
from collector.pagination.models import ParamValue, RequestDescriptor

QueryParams = Union[Mapping[str, ParamValue], Iterable[Tuple[str, ParamValue]]]


def _check_base_url(base_url: str) -> str:
    if not isinstance(base_url, str) or not base_url.strip():
        raise InvalidInput("base_url must be a non-empty string")
    base_url = base_url.strip()
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidInput(f"base_url must be an absolute http(s) URL: {base_url!r}")
    if "?" in base_url or "#" in base_url:
        raise InvalidInput(
            f"base_url must not carry a query string or fragment: {base_url!r}; "
            "pass query parameters separately"
        )
    return base_url


def _check_segments(path_segments: Iterable[str]) -> Tuple[str, ...]:
    segments = []
    for seg in path_segments:
        if not isinstance(seg, str) or seg == "":
            raise InvalidInput(f"path segments must be non-empty strings, got {seg!r}")
        segments.append(seg)
    return tuple(segments)


def _check_params(query_params: Optional[QueryParams]) -> Tuple[Tuple[str, ParamValue], ...]:
    if query_params is None:
        return ()
    pairs = query_params.items() if isinstance(query_params, Mapping) else query_params
    merged: dict[str, ParamValue] = {}
    for key, value in pairs:
        if not isinstance(key, str) or not key:
            raise InvalidInput(f"query parameter names must be non-empty strings, got {key!r}")
        if value is None or not isinstance(value, (str, int, float)):
            raise InvalidInput(f"query parameter {key!r} has unsupported value {value!r}")
        # Later assignments win; dict keeps the position of the first one.
        merged[key] = value
    return tuple(merged.items())


def build_request(
    base_url: str,
    path_segments: Iterable[str] = (),
    query_params: Optional[QueryParams] = None,
) -> RequestDescriptor:
    """Build a :class:`RequestDescriptor` from its parts.

    Pure and deterministic: equal inputs always give equal descriptors with the
    same ``url``.  Each path segment is percent-escaped on its own, so a ``/``
    inside a segment never introduces an extra path level.

    Raises:
        InvalidInput: If *base_url* is empty, not an absolute http(s) URL, or
            already contains a query string; if a segment is empty; or if a
            query parameter is unnamed or has a non-scalar value.
    """
    if isinstance(path_segments, str):
        raise InvalidInput("path_segments must be a sequence of strings, not a single string")
    return RequestDescriptor(
        base_url=_check_base_url(base_url),
        path_segments=_check_segments(path_segments),
        query_params=_check_params(query_params),
    )
