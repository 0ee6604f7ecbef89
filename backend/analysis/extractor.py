"""Fact extraction: turns a page body into :class:`PageFacts`.

``extract`` never raises for content problems.  A missing title, meta tag or
canonical link simply shows up as ``exists=False`` in the facts.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from backend.analysis.models import (
    CanonicalFacts,
    H1Facts,
    ImageFacts,
    LinkFacts,
    MetaFacts,
    MissingAltImage,
    PageFacts,
    StatusFacts,
    TitleFacts,
    UrlShapeFacts,
)
from backend.config import settings
from backend.scraper.urls import hostname_of, is_absolute_url, resolve_url

TITLE_MIN, TITLE_MAX = 30, 60
META_MIN, META_MAX = 120, 160
SHORT_URL_MAX = 100

# Slider/carousel navigation labels that leak into heading text.
_LEADING_NAV_RE = re.compile(r"^Links\b\s*", re.IGNORECASE)
_TRAILING_NAV_RE = re.compile(r"\s*\bRechtsaf\b$", re.IGNORECASE)
_READABLE_PATH_RE = re.compile(r"^[a-zA-Z0-9\-/.]*$")
_SKIPPED_HREF_PREFIXES = ("#", "mailto:", "tel:")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def clean_heading_text(text: str) -> str:
    """Strip a leading ``Links`` and a trailing ``Rechtsaf`` token.

    Only whole words at the very start or end are removed, so sentences that
    merely contain "links" or "linksaf" are left alone.  If nothing would be
    left the trimmed input is returned instead.
    """
    if not text:
        return text
    original = text.strip()
    cleaned = _LEADING_NAV_RE.sub("", original)
    cleaned = _TRAILING_NAV_RE.sub("", cleaned).strip()
    return cleaned or original


def _contains_keyword(text: str, keyword: str) -> Optional[bool]:
    if not keyword:
        return None
    return keyword.lower() in text.lower()


def _robots_flags(value: Optional[str]) -> tuple[bool, bool]:
    value = (value or "").lower()
    return "noindex" in value, "nofollow" in value


def _find_meta(soup: BeautifulSoup, name: str) -> Optional[Tag]:
    for tag in soup.find_all("meta"):
        if (tag.get("name") or "").strip().lower() == name:
            return tag
    return None


def _find_canonical(soup: BeautifulSoup) -> Optional[Tag]:
    for tag in soup.find_all("link"):
        rel = tag.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if [r.lower() for r in rel] == ["canonical"]:
            return tag
    return None


# ---------------------------------------------------------------------------
# Per-signal analysers
# ---------------------------------------------------------------------------

def _status(status_code: int, headers: Mapping[str, str]) -> StatusFacts:
    lowered = {k.lower(): v for k, v in headers.items()}
    noindex, nofollow = _robots_flags(lowered.get("x-robots-tag"))
    return StatusFacts(
        status_code=status_code,
        is_success=200 <= status_code < 300,
        noindex=noindex,
        nofollow=nofollow,
    )


def _title(soup: BeautifulSoup, keyword: str) -> TitleFacts:
    element = soup.find("title")
    text = element.get_text().strip() if element else ""
    return TitleFacts(
        exists=element is not None,
        text=text,
        length=len(text),
        is_optimal=TITLE_MIN <= len(text) <= TITLE_MAX,
        has_keyword=_contains_keyword(text, keyword),
    )


def _h1(soup: BeautifulSoup, keyword: str) -> H1Facts:
    texts = tuple(clean_heading_text(h1.get_text().strip()) for h1 in soup.find_all("h1"))
    keyword_present: Optional[bool] = None
    if keyword:
        keyword_present = any(keyword.lower() in t.lower() for t in texts)
    return H1Facts(
        count=len(texts),
        texts=texts,
        is_optimal=len(texts) == 1,
        keyword_present=keyword_present,
    )


def _meta(soup: BeautifulSoup) -> MetaFacts:
    description = _find_meta(soup, "description")
    robots = _find_meta(soup, "robots")
    text = (description.get("content") or "").strip() if description else ""
    noindex, nofollow = _robots_flags(robots.get("content") if robots else None)
    return MetaFacts(
        exists=description is not None,
        text=text,
        length=len(text),
        is_optimal=META_MIN <= len(text) <= META_MAX,
        noindex=noindex,
        nofollow=nofollow,
    )


def _images(soup: BeautifulSoup, page_url: str) -> ImageFacts:
    images = soup.find_all("img")
    with_alt = [img for img in images if img.get("alt")]
    without_alt = [img for img in images if not img.get("alt")]

    missing: list[MissingAltImage] = []
    for img in without_alt:
        src = (img.get("src") or "").strip()
        if not src:
            continue
        filename = src.split("/")[-1] or src
        try:
            full_url = urljoin(page_url, src)
        except ValueError:
            full_url = src
        missing.append(MissingAltImage(filename=filename, src=src, full_url=full_url))

    total = len(images)
    percentage = round(len(with_alt) / total * 100) if total else 100
    return ImageFacts(
        total=total,
        with_alt=len(with_alt),
        without_alt=len(without_alt),
        percentage=percentage,
        missing_alt=tuple(missing),
    )


def _canonical(soup: BeautifulSoup, page_url: str) -> CanonicalFacts:
    element = _find_canonical(soup)
    href = element.get("href") if element else None
    return CanonicalFacts(
        exists=element is not None,
        url=href,
        is_self_referencing=href == page_url,
        is_valid=is_absolute_url(href),
    )


def _links(soup: BeautifulSoup, page_url: str, limit: int) -> LinkFacts:
    anchors = soup.find_all("a", href=True)
    page_host = hostname_of(page_url)
    internal = external = broken = inspected = 0

    for anchor in anchors:
        if inspected >= limit:
            break
        href = (anchor.get("href") or "").strip()
        if not href or href.startswith(_SKIPPED_HREF_PREFIXES):
            continue
        inspected += 1
        absolute = resolve_url(href, page_url)
        if absolute is None:
            broken += 1
        elif hostname_of(absolute) == page_host:
            internal += 1
        else:
            external += 1

    return LinkFacts(
        total_seen=len(anchors),
        internal=internal,
        external=external,
        broken=broken,
        checked_count=internal + external,
    )


def _url_shape(url: str) -> UrlShapeFacts:
    try:
        parts = urlsplit(url)
        path, query, scheme = parts.path, parts.query, parts.scheme
    except ValueError:
        path, query, scheme = "", "", ""
    return UrlShapeFacts(
        length=len(url),
        is_short=len(url) <= SHORT_URL_MAX,
        has_params=bool(query),
        depth=len([segment for segment in path.split("/") if segment]),
        is_readable=bool(_READABLE_PATH_RE.match(path)),
        protocol=f"{scheme}:" if scheme else "",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(
    body_text: str,
    url: str,
    keyword: str = "",
    *,
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
    link_limit: Optional[int] = None,
) -> PageFacts:
    """Derive the SEO facts of one page.

    Args:
        body_text: Raw HTML of the page.
        url: The URL the body was retrieved from (used to resolve relative
            links and to test canonical self-reference).
        keyword: Optional focus keyword; empty means "not applicable".
        status_code: HTTP status reported by the retrieval backend.
        headers: Response headers (``x-robots-tag`` is inspected).
        link_limit: How many qualifying anchors to inspect.
    """
    keyword = (keyword or "").strip()
    soup = BeautifulSoup(body_text or "", "html.parser")
    limit = settings.link_check_limit if link_limit is None else link_limit

    return PageFacts(
        url=url,
        keyword=keyword,
        status=_status(status_code, headers or {}),
        title=_title(soup, keyword),
        h1=_h1(soup, keyword),
        meta=_meta(soup),
        images=_images(soup, url),
        canonical=_canonical(soup, url),
        links=_links(soup, url, limit),
        url_shape=_url_shape(url),
    )
