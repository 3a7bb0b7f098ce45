"""Pagination controller: drives build -> fetch -> normalize until done.

The loop is strictly sequential because each continuation decision depends on
the previous page's metadata.  Records are appended only after a page was
fetched and normalized successfully, so retries never duplicate data and a
failure never discards pages that already arrived.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Tuple, Union

from collector.pagination.errors import CollectorError, InvalidInput, NetworkError, RemoteError
from collector.pagination.fetcher import Fetcher
from collector.pagination.models import (
    AccumulatedResult,
    PageMetadata,
    RawResponse,
    Record,
    RequestDescriptor,
    ResponseShape,
    State,
    StopReason,
)
from collector.pagination.normalizer import normalize
from collector.pagination.request_builder import QueryParams, build_request

FetchCallable = Union[Fetcher, Callable[[RequestDescriptor], RawResponse]]
HasMore = Callable[[PageMetadata, int], bool]


# ---------------------------------------------------------------------------
# Termination policies
# ---------------------------------------------------------------------------

def has_more_pages(metadata: PageMetadata, collected: int) -> bool:
    """Default policy: trust explicit totals, stop on an empty page.

    *collected* is the number of records accumulated so far, including the
    page described by *metadata*.
    """
    if metadata.record_count == 0 or metadata.total_records == 0:
        return False
    if metadata.total_pages is not None:
        if metadata.total_pages == 0:
            return False
        return metadata.current_page < metadata.total_pages
    if metadata.total_records is not None:
        return collected < metadata.total_records
    # No totals reported: keep going until an empty page (or a cap).
    return True


def until_empty_page(metadata: PageMetadata, collected: int) -> bool:
    """Ignore reported totals; continue until a page comes back empty."""
    return metadata.record_count > 0


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class PaginationController:
    """Collect every page of a paginated endpoint into one ordered result.

    One controller can run several paginations one after the other; each
    :meth:`run` starts from a fresh accumulator.
    """

    def __init__(
        self,
        fetcher: FetchCallable,
        shape: ResponseShape = ResponseShape(),
        *,
        page_param: str = "page",
        max_pages: Optional[int] = None,
        max_records: Optional[int] = None,
        retries: int = 0,
        retry_delay: float = 1.0,
        page_delay: float = 0.0,
        has_more: HasMore = has_more_pages,
        raise_on_error: bool = True,
    ) -> None:
        if not callable(fetcher):
            raise InvalidInput(f"fetcher must be callable, got {type(fetcher).__name__}")
        if not page_param:
            raise InvalidInput("page_param must be a non-empty string")
        if max_pages is not None and max_pages < 1:
            raise InvalidInput(f"max_pages must be >= 1, got {max_pages}")
        if max_records is not None and max_records < 1:
            raise InvalidInput(f"max_records must be >= 1, got {max_records}")
        if retries < 0:
            raise InvalidInput(f"retries must be >= 0, got {retries}")

        self.fetcher = fetcher
        self.shape = shape
        self.page_param = page_param
        self.max_pages = max_pages
        self.max_records = max_records
        self.retries = retries
        self.retry_delay = retry_delay
        self.page_delay = page_delay
        self.has_more = has_more
        self.raise_on_error = raise_on_error
        self.state = State.INITIALIZING

    def _fetch_page(self, request: RequestDescriptor, page: int) -> Tuple[List[Record], PageMetadata]:
        """Fetch and normalize one page, retrying transport/remote failures."""
        attempt = 0
        while True:
            try:
                raw = self.fetcher(request)
                return normalize(raw, self.shape, requested_page=page)
            except (NetworkError, RemoteError) as exc:
                if attempt >= self.retries:
                    raise
                delay = self.retry_delay * (2 ** attempt)
                attempt += 1
                print(
                    f"[paginate] page {page} failed ({exc}); "
                    f"retry {attempt}/{self.retries} in {delay:.1f}s …"
                )
                time.sleep(delay)

    def _finish(
        self,
        records: List[Record],
        metadata: Optional[PageMetadata],
        pages: int,
        reason: StopReason,
        error: Optional[CollectorError] = None,
    ) -> AccumulatedResult:
        self.state = State.DONE
        result = AccumulatedResult(
            records=tuple(records),
            metadata=metadata,
            pages_fetched=pages,
            stop_reason=reason,
            error=error,
        )
        print(f"[paginate] done: {len(result)} record(s) from {pages} page(s) ({reason.value}).")
        return result

    def run(
        self,
        base_url: str,
        path_segments: Iterable[str] = (),
        query_params: Optional[QueryParams] = None,
    ) -> AccumulatedResult:
        """Paginate from page 1 and return every record in arrival order.

        Raises:
            InvalidInput: Before any request if the arguments are malformed.
            NetworkError, RemoteError, MalformedResponse: When a page fails
                (after retries, where applicable).  ``error.partial`` holds the
                records collected before the failure.  Not raised when the
                controller was built with ``raise_on_error=False``; the partial
                result is returned with ``error`` set instead.
        """
        self.state = State.INITIALIZING
        records: List[Record] = []
        metadata: Optional[PageMetadata] = None
        pages = 0

        try:
            base_request = build_request(base_url, path_segments, query_params)
        except InvalidInput as exc:
            exc.partial = self._finish(records, metadata, pages, StopReason.ERROR, exc)
            raise

        self.state = State.FETCHING
        page = 1
        while True:
            request = base_request.with_param(self.page_param, page)
            try:
                page_records, metadata = self._fetch_page(request, page)
            except CollectorError as exc:
                print(f"[paginate] ✗ page {page} failed: {exc}")
                result = self._finish(records, metadata, pages, StopReason.ERROR, exc)
                exc.partial = result
                if self.raise_on_error:
                    raise
                return result

            pages += 1
            records.extend(page_records)
            print(f"[paginate] page {page}: {len(page_records)} record(s), {len(records)} total.")

            more = self.has_more(metadata, len(records))
            if self.max_records is not None and len(records) >= self.max_records and (
                more or len(records) > self.max_records
            ):
                del records[self.max_records:]
                return self._finish(records, metadata, pages, StopReason.MAX_RECORDS)
            if not more:
                return self._finish(records, metadata, pages, StopReason.COMPLETE)
            if self.max_pages is not None and pages >= self.max_pages:
                return self._finish(records, metadata, pages, StopReason.MAX_PAGES)

            page += 1
            if self.page_delay > 0:
                time.sleep(self.page_delay)


def paginate(
    fetcher: FetchCallable,
    base_url: str,
    path_segments: Iterable[str] = (),
    query_params: Optional[QueryParams] = None,
    max_pages: Optional[int] = None,
    **options,
) -> AccumulatedResult:
    """Collect all pages of *base_url* with *fetcher*.

    Thin wrapper around :class:`PaginationController`; *options* are passed to
    its constructor (``shape``, ``page_param``, ``max_records``, ``retries``,
    ``has_more``, ...).
    """
    controller = PaginationController(fetcher, max_pages=max_pages, **options)
    return controller.run(base_url, path_segments, query_params)
