"""Process-wide settings for the PolicyGuard scan agent.

Values are read once from the environment (and a `.env` file in the project
root, loaded without overriding variables that are already set) when this
module is first imported.  The resulting :data:`settings` object is frozen and
is never mutated afterwards.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_HERE = Path(__file__).resolve()
load_dotenv(_HERE.parents[1] / ".env", override=False)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Semantic classifier (Gemini)
    # ------------------------------------------------------------------
    gemini_api_key: str | None = field(
        default_factory=lambda: os.environ.get("GEMINI_API_KEY") or None
    )
    gemini_model: str = field(
        default_factory=lambda: os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
    )
    classifier_timeout_ms: int = field(
        default_factory=lambda: _env_int("CLASSIFIER_TIMEOUT_MS", 30000)
    )
    classifier_context_chars: int = field(
        default_factory=lambda: _env_int("CLASSIFIER_CONTEXT_CHARS", 16000)
    )

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    fetch_timeout_s: float = field(
        default_factory=lambda: _env_float("FETCH_TIMEOUT_S", 20.0)
    )
    fetch_max_redirects: int = field(
        default_factory=lambda: _env_int("FETCH_MAX_REDIRECTS", 5)
    )
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    )

    # ------------------------------------------------------------------
    # Crawl frontier / scan
    # ------------------------------------------------------------------
    max_pages: int = field(default_factory=lambda: _env_int("CRAWL_MAX_PAGES", 500))
    seed_links: int = field(default_factory=lambda: _env_int("CRAWL_SEED_LINKS", 100))
    expand_pages: int = field(default_factory=lambda: _env_int("CRAWL_EXPAND_PAGES", 20))
    concurrency: int = field(
        default_factory=lambda: max(1, _env_int("SCAN_CONCURRENCY", 12))
    )

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------
    cors_origins: list[str] = field(
        default_factory=lambda: _env_list("POLICYGUARD_CORS_ORIGINS", ["http://localhost:3000"])
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("POLICYGUARD_LOG_LEVEL", "INFO").upper()
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root log handler used by the service."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="[%(levelname)s] %(asctime)s %(name)s: %(message)s",
    )
