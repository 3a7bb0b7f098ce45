"""Centralised settings for the collector CLI.

Values can be overridden via environment variables or a `.env` file in the
project root (loaded automatically when this module is imported).  The
pagination core never reads these settings directly; callers convert them into
explicit configuration objects (see :class:`FetcherConfig.from_settings`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("COLLECTOR_REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "COLLECTOR_USER_AGENT",
            "Mozilla/5.0 (compatible; collector/0.1; social-science research)",
        )
    )

    # ------------------------------------------------------------------
    # API credentials
    # ------------------------------------------------------------------
    api_key: str = field(
        default_factory=lambda: os.environ.get("COLLECTOR_API_KEY", "")
    )
    api_key_param: str = field(
        default_factory=lambda: os.environ.get("COLLECTOR_API_KEY_PARAM", "api-key")
    )
    api_key_header: str = field(
        default_factory=lambda: os.environ.get("COLLECTOR_API_KEY_HEADER", "")
    )

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    page_param: str = field(
        default_factory=lambda: os.environ.get("COLLECTOR_PAGE_PARAM", "page")
    )
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("COLLECTOR_MAX_PAGES", "100"))
    )
    retries: int = field(
        default_factory=lambda: int(os.environ.get("COLLECTOR_RETRIES", "2"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("COLLECTOR_RETRY_BASE_DELAY", "1.0"))
    )
    page_delay: float = field(
        default_factory=lambda: float(os.environ.get("COLLECTOR_PAGE_DELAY", "0.0"))
    )

    def redacted(self) -> dict[str, object]:
        """Return the settings as a dict with the API key masked."""
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        if values["api_key"]:
            values["api_key"] = "***"
        return values


# Module-level singleton — used by the CLI only:
#   from collector.config import settings
settings = Settings()
