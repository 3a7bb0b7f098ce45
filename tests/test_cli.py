"""Tests for the collector CLI.

The HTTP layer is replaced by a ``FixtureFetcher`` via ``monkeypatch`` on
``cli.main._build_fetcher``; no real requests are made.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from cli.main import app
from collector.pagination.errors import RemoteError
from collector.pagination.fetcher import FixtureFetcher

runner = CliRunner()

_BASE = "https://api.example.com"


@pytest.fixture
def two_pages(monkeypatch):
    """Serve a two-page endpoint at /items."""
    fetcher = FixtureFetcher({
        f"{_BASE}/items?q=vote&page=1": {"totalPages": 2, "records": [{"id": 1, "user": {"name": "ana"}}]},
        f"{_BASE}/items?q=vote&page=2": {"totalPages": 2, "records": [{"id": 2, "user": {"name": "ben"}}]},
    })
    monkeypatch.setattr("cli.main._build_fetcher", lambda: fetcher)
    return fetcher


def test_fetch_writes_output_file(two_pages, tmp_path):
    out = tmp_path / "records.jsonl"

    result = runner.invoke(
        app,
        ["fetch", "--base-url", _BASE, "--path", "items", "--param", "q=vote", "--output", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert "2 record(s) from 2 page(s)" in result.output
    rows = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert rows == [{"id": 1, "user.name": "ana"}, {"id": 2, "user.name": "ben"}]


def _split_runner() -> CliRunner:
    """Runner whose ``stdout`` excludes stderr on every Click version."""
    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        return CliRunner()


def test_fetch_to_stdout_is_pure_json_lines(two_pages):
    result = _split_runner().invoke(app, ["fetch", "--base-url", _BASE, "--path", "items", "--param", "q=vote"])

    assert result.exit_code == 0, result.output
    rows = [json.loads(line) for line in result.stdout.splitlines()]
    assert rows == [{"id": 1, "user.name": "ana"}, {"id": 2, "user.name": "ben"}]
    assert "[paginate] page 1" in result.stderr
    assert "2 record(s) from 2 page(s)" in result.stderr


def test_fetch_unsupported_output_rejected_before_fetching(two_pages, tmp_path):
    out = tmp_path / "records.xlsx"

    result = runner.invoke(
        app,
        ["fetch", "--base-url", _BASE, "--path", "items", "--param", "q=vote", "--output", str(out)],
    )

    assert result.exit_code == 2
    assert "Unsupported output format" in result.output
    assert two_pages.calls == []
    assert not out.exists()


def test_fetch_max_pages_warns(two_pages):
    result = runner.invoke(
        app,
        ["fetch", "--base-url", _BASE, "--path", "items", "--param", "q=vote", "--max-pages", "1"],
    )

    assert result.exit_code == 0, result.output
    assert "Stopped early (max_pages)" in result.output
    assert len(two_pages.calls) == 1


def test_fetch_failure_keeps_partial(monkeypatch, tmp_path):
    fetcher = FixtureFetcher({
        f"{_BASE}/items?page=1": {"totalPages": 3, "records": [{"id": 1}]},
        f"{_BASE}/items?page=2": RemoteError(500, url=f"{_BASE}/items?page=2"),
    })
    monkeypatch.setattr("cli.main._build_fetcher", lambda: fetcher)
    out = tmp_path / "partial.csv"

    result = runner.invoke(
        app,
        ["fetch", "--base-url", _BASE, "--path", "items", "--retries", "0", "--output", str(out)],
    )

    assert result.exit_code == 1
    assert "Collection failed: HTTP 500" in result.output
    assert "Keeping 1 record(s)" in result.output
    assert out.read_text(encoding="utf-8").splitlines() == ["id", "1"]


def test_fetch_invalid_base_url(two_pages):
    result = runner.invoke(app, ["fetch", "--base-url", "https://api.example.com/items?q=x"])

    assert result.exit_code == 2
    assert "Invalid input" in result.output
    assert two_pages.calls == []


def test_fetch_unknown_shape(two_pages):
    result = runner.invoke(app, ["fetch", "--base-url", _BASE, "--shape", "nope"])

    assert result.exit_code == 2
    assert "unknown response shape" in result.output


def test_fetch_field_overrides(monkeypatch):
    fetcher = FixtureFetcher({
        f"{_BASE}/items?page=1": {"data": {"items": [{"id": 1}]}, "meta": {"pages": 1}},
    })
    monkeypatch.setattr("cli.main._build_fetcher", lambda: fetcher)

    result = runner.invoke(
        app,
        [
            "fetch", "--base-url", _BASE, "--path", "items",
            "--records-field", "data.items", "--page-field", "meta.pages",
        ],
    )

    assert result.exit_code == 0, result.output
    assert '{"id": 1}' in result.output


def test_build_url():
    result = runner.invoke(
        app,
        ["build-url", "--base-url", _BASE, "--path", "search", "--param", "q=climate change", "--page", "3"],
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == f"{_BASE}/search?q=climate+change&page=3"


def test_build_url_bad_param():
    result = runner.invoke(app, ["build-url", "--base-url", _BASE, "--param", "novalue"])
    assert result.exit_code == 2


def test_show_config_redacts_key(monkeypatch):
    monkeypatch.setattr("cli.main.settings.api_key", "super-secret")

    result = runner.invoke(app, ["show-config"])

    assert result.exit_code == 0, result.output
    assert "super-secret" not in result.output
    assert "***" in result.output
