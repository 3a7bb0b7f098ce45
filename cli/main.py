"""collector CLI — entry-point for paginated data collection.

Usage:
    python cli/main.py --help

Commands:
    fetch        → collect every page of an endpoint and write the records
    build-url    → print the request URL for one page (debugging aid)
    show-config  → print the effective settings (API key redacted)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from collector.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import contextlib
import dataclasses
import json
from typing import List, Optional, Tuple

import typer

from collector.config import settings
from collector.export import SUPPORTED_SUFFIXES, write_records
from collector.pagination import (
    AccumulatedResult,
    CollectorError,
    Fetcher,
    FetcherConfig,
    HttpxFetcher,
    InvalidInput,
    StopReason,
    build_request,
    get_shape,
    paginate,
)

app = typer.Typer(
    name="collect",
    help="Collect paginated REST API data into tables.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_params(raw: Optional[List[str]]) -> List[Tuple[str, str]]:
    """Turn ``["q=climate", "lang=en"]`` into key/value pairs."""
    pairs: List[Tuple[str, str]] = []
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--param")
        pairs.append((key, value))
    return pairs


def _build_fetcher() -> Fetcher:
    return HttpxFetcher(FetcherConfig.from_settings(settings))


def _emit(result: AccumulatedResult, output: Optional[Path]) -> None:
    if output is None:
        for record in result.records:
            typer.echo(json.dumps(record, ensure_ascii=False))
        return
    write_records(result.records, output)
    typer.echo(f"[fetch] Wrote {len(result)} record(s) to {output}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("fetch")
def fetch(
    base_url: str = typer.Option(..., help="API base URL, without a query string."),
    path: Optional[List[str]] = typer.Option(None, "--path", help="Path segment (repeatable)."),
    param: Optional[List[str]] = typer.Option(None, "--param", help="Query parameter KEY=VALUE (repeatable)."),
    shape: str = typer.Option("default", help="Response shape preset: default | guardian | list."),
    records_field: Optional[str] = typer.Option(None, help="Dotted path to the record list."),
    page_field: Optional[str] = typer.Option(None, help="Dotted path to the total page count."),
    count_field: Optional[str] = typer.Option(None, help="Dotted path to the total record count."),
    current_page_field: Optional[str] = typer.Option(None, help="Dotted path to the current page number."),
    page_param: str = typer.Option(settings.page_param, help="Query parameter holding the page number."),
    max_pages: int = typer.Option(settings.max_pages, help="Stop after this many pages."),
    max_records: Optional[int] = typer.Option(None, help="Stop once this many records are collected."),
    retries: int = typer.Option(settings.retries, help="Retries per page on network/HTTP errors."),
    output: Optional[Path] = typer.Option(None, help="Output file (.jsonl, .json or .csv). Defaults to stdout."),
) -> None:
    """Collect every page of an endpoint and write the flattened records."""
    try:
        response_shape = get_shape(shape)
        overrides = {
            "records_field": records_field,
            "page_field": page_field,
            "count_field": count_field,
            "current_page_field": current_page_field,
        }
        response_shape = dataclasses.replace(
            response_shape, **{k: v for k, v in overrides.items() if v is not None}
        )
    except InvalidInput as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=2)
    if output is not None and output.suffix.lower() not in SUPPORTED_SUFFIXES:
        typer.echo(
            f"❌ Unsupported output format {output.suffix or '(none)'!r}; "
            f"use one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
        raise typer.Exit(code=2)

    # Records go to stdout when there is no output file; keep progress off it.
    to_stderr = output is None
    progress = contextlib.redirect_stdout(sys.stderr) if to_stderr else contextlib.nullcontext()

    failed = False
    fetcher = _build_fetcher()
    try:
        with progress:
            result = paginate(
                fetcher,
                base_url,
                path or (),
                _parse_params(param),
                max_pages=max_pages,
                shape=response_shape,
                page_param=page_param,
                max_records=max_records,
                retries=retries,
                retry_delay=settings.retry_base_delay,
                page_delay=settings.page_delay,
            )
    except InvalidInput as exc:
        typer.echo(f"❌ Invalid input: {exc}", err=to_stderr)
        raise typer.Exit(code=2)
    except CollectorError as exc:
        typer.echo(f"❌ Collection failed: {exc}", err=to_stderr)
        result = exc.partial
        if result is None:
            result = AccumulatedResult(stop_reason=StopReason.ERROR, error=exc)
        failed = True
    finally:
        close = getattr(fetcher, "close", None)
        if close is not None:
            close()

    if result.bound_reached:
        typer.echo(
            f"⚠️  Stopped early ({result.stop_reason.value}); more data may be available.",
            err=to_stderr,
        )
    if failed and result.records:
        typer.echo(
            f"[fetch] Keeping {len(result)} record(s) collected before the failure.",
            err=to_stderr,
        )
    _emit(result, output)
    typer.echo(
        f"[fetch] {len(result)} record(s) from {result.pages_fetched} page(s).",
        err=to_stderr,
    )

    if failed:
        raise typer.Exit(code=1)


@app.command("build-url")
def build_url(
    base_url: str = typer.Option(..., help="API base URL, without a query string."),
    path: Optional[List[str]] = typer.Option(None, "--path", help="Path segment (repeatable)."),
    param: Optional[List[str]] = typer.Option(None, "--param", help="Query parameter KEY=VALUE (repeatable)."),
    page: int = typer.Option(1, help="Page number to include."),
    page_param: str = typer.Option(settings.page_param, help="Query parameter holding the page number."),
) -> None:
    """Print the request URL for one page."""
    try:
        request = build_request(base_url, path or (), _parse_params(param))
    except InvalidInput as exc:
        typer.echo(f"❌ Invalid input: {exc}")
        raise typer.Exit(code=2)
    typer.echo(request.with_param(page_param, page).url)


@app.command("show-config")
def show_config() -> None:
    """Print the effective settings (API key redacted)."""
    for name, value in settings.redacted().items():
        typer.echo(f"  {name:<18} {value}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
