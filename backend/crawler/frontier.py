"""Breadth-first discovery of same-site pages.

``discover`` walks the link graph from a seed URL with a FIFO queue and
returns at most ``max_pages`` URLs in the order they were discovered.  The
crawl state (visited set, queue, discovered set) lives only inside one
call.
"""

from __future__ import annotations

from collections import deque
from typing import Awaitable, Callable, Deque, List, Set
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from backend.errors import SeoMaxError
from backend.scraper.models import RetrievedPage
from backend.scraper.urls import ensure_valid_url, hostname_of, resolve_url

Fetch = Callable[[str], Awaitable[RetrievedPage]]

TRACKING_PARAMS = frozenset({"utm_source", "utm_medium", "utm_campaign", "fbclid", "gclid"})


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def _is_tracking_param(name: str) -> bool:
    return name in TRACKING_PARAMS or name.startswith("utm_")


def canonicalize_url(url: str) -> str:
    """Drop the fragment and tracking query parameters from *url*.

    Tracking pairs are cut out of the raw query string; the remaining pairs
    keep their order and their original encoding.  Unparseable input is
    returned unchanged.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    query = "&".join(
        segment
        for segment in parts.query.split("&")
        if segment and not _is_tracking_param(unquote_plus(segment.split("=", 1)[0]))
    )
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def is_internal_url(url: str, base_url: str, include_subdomains: bool = False) -> bool:
    """Same host as *base_url*; with *include_subdomains* a dot-suffix match
    in either direction also counts."""
    host, base_host = hostname_of(url), hostname_of(base_url)
    if not host or not base_host:
        return False
    if host == base_host:
        return True
    if include_subdomains:
        return host.endswith("." + base_host) or base_host.endswith("." + host)
    return False


def extract_hrefs(html: str) -> List[str]:
    """Return every non-empty anchor ``href`` in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    hrefs: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = (anchor.get("href") or "").strip()
        if href:
            hrefs.append(href)
    return hrefs


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def discover(
    base_url: str,
    max_pages: int,
    include_subdomains: bool = False,
    *,
    fetch: Fetch,
) -> List[str]:
    """Discover up to *max_pages* internal URLs reachable from *base_url*.

    Pages that cannot be retrieved are logged and skipped; malformed hrefs
    are dropped.  A cap of 0 or 1 yields only the seed.

    Args:
        base_url: Seed URL; also defines what counts as internal.
        max_pages: Upper bound on the number of URLs returned.
        include_subdomains: Treat subdomains of the seed host as internal.
        fetch: Coroutine function returning a :class:`RetrievedPage`.

    Raises:
        InvalidURL: *base_url* is malformed.
    """
    base_url = ensure_valid_url(base_url)
    cap = max(max_pages, 1)

    discovered: List[str] = [base_url]
    seen: Set[str] = {base_url, canonicalize_url(base_url)}
    visited: Set[str] = set()
    queue: Deque[str] = deque([base_url])

    while queue and len(discovered) < cap:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)

        try:
            page = await fetch(current)
        except SeoMaxError as exc:
            print(f"[discover] ✗ Failed {current!r}: {exc}")
            continue

        for href in extract_hrefs(page.body_text):
            absolute = resolve_url(href, current)
            if absolute is None or not is_internal_url(absolute, base_url, include_subdomains):
                continue
            clean = canonicalize_url(absolute)
            if clean not in seen and len(discovered) < cap:
                seen.add(clean)
                discovered.append(clean)
                queue.append(clean)

    print(f"[discover] {len(discovered)} page(s) found from {base_url}")
    return discovered[:cap]
