"""Small URL helpers shared by the scraper, extractor and crawler."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from backend.errors import InvalidURL


def is_absolute_url(value: str | None) -> bool:
    """Return ``True`` if *value* parses as an absolute URL with a host."""
    if not value:
        return False
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def ensure_valid_url(url: str) -> str:
    """Return *url* stripped, or raise :class:`InvalidURL`.

    Only ``http`` and ``https`` URLs with a host name are accepted.
    """
    candidate = (url or "").strip()
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        parts.port
    except ValueError as exc:
        raise InvalidURL(url) from exc
    if parts.scheme not in ("http", "https") or not host:
        raise InvalidURL(url)
    return candidate


def resolve_url(href: str, base_url: str) -> str | None:
    """Resolve *href* against *base_url*; ``None`` if it cannot be parsed.

    A port that is not a number in range counts as unparseable.
    """
    try:
        absolute = urljoin(base_url, href.strip())
        parts = urlsplit(absolute)
        parts.hostname
        parts.port
    except ValueError:
        return None
    return absolute


def hostname_of(url: str) -> str:
    """Lower-cased host name of *url*, or ``""`` when there is none."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""
