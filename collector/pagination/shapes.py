"""Named response shapes for commonly used endpoints."""

from __future__ import annotations

from collector.pagination.errors import InvalidInput
from collector.pagination.models import ResponseShape

SHAPES: dict[str, ResponseShape] = {
    # {"records": [...], "totalPages": 3, "totalRecords": 120}
    "default": ResponseShape(),
    # The Guardian content API: {"response": {"results": [...], "pages": 12, ...}}
    "guardian": ResponseShape(
        records_field="response.results",
        page_field="response.pages",
        count_field="response.total",
        current_page_field="response.currentPage",
        page_size_field="response.pageSize",
    ),
    # A bare JSON array per page; stops on the first empty page.
    "list": ResponseShape(records_field=None, page_field=None, count_field=None),
}


def get_shape(name: str) -> ResponseShape:
    """Return the preset called *name*."""
    try:
        return SHAPES[name]
    except KeyError:
        known = ", ".join(sorted(SHAPES))
        raise InvalidInput(f"unknown response shape {name!r} (known: {known})") from None
