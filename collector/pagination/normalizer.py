"""Response normalization: JSON body -> flat records + page metadata."""

from __future__ import annotations

import json
from typing import Any, List, Optional, Tuple

from collector.pagination.errors import MalformedResponse
from collector.pagination.models import PageMetadata, RawResponse, Record, ResponseShape

_MISSING = object()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _decode(raw: RawResponse) -> Any:
    body = raw.body
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        return json.loads(body)
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedResponse(f"response from {raw.url or '(unknown url)'} is not valid JSON: {exc}") from exc


def _lookup(document: Any, path: str) -> Any:
    """Follow a dotted *path* through nested dicts; ``_MISSING`` if absent."""
    node = document
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return _MISSING
        node = node[key]
    return node


def _as_count(value: Any, path: str) -> Optional[int]:
    if value is _MISSING or value is None:
        return None
    if isinstance(value, bool):
        raise MalformedResponse(f"{path!r} must be an integer, got {value!r}")
    if isinstance(value, str):
        digits = value.strip()
        if digits.isascii() and digits.isdigit():
            value = int(digits)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise MalformedResponse(f"{path!r} must be a non-negative integer, got {value!r}")
    return value


def _field(document: Any, path: Optional[str]) -> Optional[int]:
    if path is None:
        return None
    return _as_count(_lookup(document, path), path)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def flatten_record(record: Record, sep: str = ".") -> Record:
    """Flatten one level of nested objects in *record*.

    ``{"user": {"id": 1, "geo": {"lat": 0}}, "tags": ["a"]}`` becomes
    ``{"user.id": 1, "user.geo": {"lat": 0}, "tags": ["a"]}``.  Lists are left
    untouched and only the first level of nesting is expanded.
    """
    flat: Record = {}
    for key, value in record.items():
        if isinstance(value, dict):
            for child_key, child_value in value.items():
                flat[f"{key}{sep}{child_key}"] = child_value
        else:
            flat[key] = value
    return flat


def normalize(
    raw: RawResponse,
    shape: ResponseShape = ResponseShape(),
    requested_page: int = 1,
) -> Tuple[List[Record], PageMetadata]:
    """Parse *raw* into flattened records and its :class:`PageMetadata`.

    An empty record list is never an error, even when the metadata fields are
    absent.

    Raises:
        MalformedResponse: If the body is not JSON, the record list is missing
            or not a list of objects, a non-empty page carries none of the
            configured metadata fields, or the metadata is inconsistent.
    """
    document = _decode(raw)

    if shape.records_field is None:
        items = document
    else:
        items = _lookup(document, shape.records_field)
        if items is _MISSING:
            raise MalformedResponse(f"response has no record list at {shape.records_field!r}")
    if not isinstance(items, list):
        raise MalformedResponse(
            f"record list at {shape.records_field or '(root)'!r} is {type(items).__name__}, not a list"
        )

    records: List[Record] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponse(f"expected every record to be an object, got {item!r:.80}")
        records.append(flatten_record(item, shape.separator))

    total_pages = _field(document, shape.page_field)
    total_records = _field(document, shape.count_field)
    expects_totals = shape.page_field is not None or shape.count_field is not None
    if records and expects_totals and total_pages is None and total_records is None:
        raise MalformedResponse(
            "response carries no pagination metadata "
            f"(looked for {shape.page_field!r} and {shape.count_field!r})"
        )

    current_page = _field(document, shape.current_page_field) or requested_page
    page_size = _field(document, shape.page_size_field) or max(len(records), 1)
    if not records and total_pages and current_page > total_pages:
        # Empty page requested past the end.
        current_page = total_pages

    try:
        metadata = PageMetadata(
            current_page=current_page,
            total_pages=total_pages,
            total_records=total_records,
            page_size=page_size,
            record_count=len(records),
        )
    except ValueError as exc:
        raise MalformedResponse(f"inconsistent pagination metadata: {exc}") from exc
    return records, metadata
