"""Crawler package: same-site page discovery and URL inventory."""

from backend.crawler.frontier import canonicalize_url, discover, is_internal_url
from backend.crawler.inventory import (
    UrlRecord,
    build_inventory,
    export_csv,
    export_txt,
    inventory_stats,
)

__all__ = [
    "discover",
    "canonicalize_url",
    "is_internal_url",
    "build_inventory",
    "inventory_stats",
    "export_csv",
    "export_txt",
    "UrlRecord",
]
