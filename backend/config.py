"""Centralised settings for the SEO-MAX backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RETRIEVAL_TIMEOUT", "15.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("SEO_USER_AGENT", "SEO-MAX-Bot/1.0")
    )
    relay_url: str = field(
        default_factory=lambda: os.environ.get(
            "SEO_RELAY_URL", "http://127.0.0.1:8000/api/proxy"
        )
    )
    public_relays_enabled: bool = field(
        default_factory=lambda: _env_flag("PUBLIC_RELAYS_ENABLED", "true")
    )

    # ------------------------------------------------------------------
    # First-party relay (served by backend.api)
    # ------------------------------------------------------------------
    relay_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RELAY_TIMEOUT", "10.0"))
    )
    relay_user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "RELAY_USER_AGENT", "SEO-MAX-Bot/1.0 (Website Analyzer)"
        )
    )

    # ------------------------------------------------------------------
    # Result cache
    # ------------------------------------------------------------------
    cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("CACHE_TTL_SECONDS", "300"))
    )
    cache_sweep_chance: float = field(
        default_factory=lambda: float(os.environ.get("CACHE_SWEEP_CHANCE", "0.1"))
    )

    # ------------------------------------------------------------------
    # Analysis / crawl
    # ------------------------------------------------------------------
    link_check_limit: int = field(
        default_factory=lambda: int(os.environ.get("LINK_CHECK_LIMIT", "20"))
    )
    sitewide_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("SITEWIDE_MAX_PAGES", "10"))
    )
    sitewide_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("SITEWIDE_CONCURRENCY", "1"))
    )


# Module-level singleton, import it everywhere:
#   from backend.config import settings
settings = Settings()
