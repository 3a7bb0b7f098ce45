"""Tests for environment-driven settings."""

from __future__ import annotations

from collector.config import Settings


def test_defaults(monkeypatch):
    for var in ("COLLECTOR_MAX_PAGES", "COLLECTOR_PAGE_PARAM", "COLLECTOR_API_KEY"):
        monkeypatch.delenv(var, raising=False)

    s = Settings()

    assert s.max_pages == 100
    assert s.page_param == "page"
    assert s.api_key == ""


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("COLLECTOR_MAX_PAGES", "7")
    monkeypatch.setenv("COLLECTOR_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("COLLECTOR_API_KEY_HEADER", "X-Api-Key")

    s = Settings()

    assert s.max_pages == 7
    assert s.request_timeout == 2.5
    assert s.api_key_header == "X-Api-Key"


def test_redacted_hides_api_key():
    s = Settings(api_key="secret")
    values = s.redacted()
    assert values["api_key"] == "***"
    assert values["page_param"] == s.page_param


def test_redacted_leaves_empty_key():
    assert Settings(api_key="").redacted()["api_key"] == ""
