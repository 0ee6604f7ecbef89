"""Shared fixtures: page-fact factory, HTML page builder and a fake chain.

``FakeChain`` stands in for :class:`backend.scraper.fetcher.RetrievalChain`
so session, API and CLI tests never touch the network.  Retrieval-layer
tests use ``respx`` instead.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Callable, Optional

import pytest

from backend.analysis.models import (
    CanonicalFacts,
    H1Facts,
    ImageFacts,
    LinkFacts,
    MetaFacts,
    PageFacts,
    StatusFacts,
    TitleFacts,
    UrlShapeFacts,
)
from backend.errors import RetrievalFailed
from backend.scraper.models import RetrievedPage

GOOD_TITLE = "Professionele SEO audit voor uw website"          # 39 chars
GOOD_META = (
    "Wij controleren titels, koppen, meta descriptions en afbeeldingen "
    "zodat uw website beter gevonden wordt in Google en andere zoekmachines."
)                                                                 # 137 chars


# ---------------------------------------------------------------------------
# PageFacts factory
# ---------------------------------------------------------------------------

def _perfect_facts(url: str, keyword: str) -> PageFacts:
    return PageFacts(
        url=url,
        keyword=keyword,
        status=StatusFacts(status_code=200, is_success=True, noindex=False, nofollow=False),
        title=TitleFacts(exists=True, text="t" * 45, length=45, is_optimal=True, has_keyword=None),
        h1=H1Facts(count=1, texts=("Over ons",), is_optimal=True, keyword_present=None),
        meta=MetaFacts(
            exists=True, text="m" * 140, length=140, is_optimal=True, noindex=False, nofollow=False
        ),
        images=ImageFacts(total=3, with_alt=3, without_alt=0, percentage=100),
        canonical=CanonicalFacts(exists=True, url=url, is_self_referencing=True, is_valid=True),
        links=LinkFacts(total_seen=12, internal=9, external=3, broken=0, checked_count=12),
        url_shape=UrlShapeFacts(
            length=40, is_short=True, has_params=False, depth=1, is_readable=True, protocol="https:"
        ),
    )


@pytest.fixture()
def make_facts() -> Callable[..., PageFacts]:
    """Build a page that passes every check; dict overrides patch sub-records.

    Example: ``make_facts(title={"exists": False})``.
    """

    def _make(url: str = "https://example.com/over-ons", keyword: str = "", **overrides) -> PageFacts:
        facts = _perfect_facts(url, keyword)
        changes = {}
        for name, value in overrides.items():
            if isinstance(value, dict):
                changes[name] = dataclasses.replace(getattr(facts, name), **value)
            else:
                changes[name] = value
        return dataclasses.replace(facts, **changes)

    return _make


# ---------------------------------------------------------------------------
# HTML builder
# ---------------------------------------------------------------------------

def build_page(
    links: tuple[str, ...] = (),
    *,
    title: Optional[str] = GOOD_TITLE,
    meta: Optional[str] = GOOD_META,
    h1s: tuple[str, ...] = ("Welkom",),
    canonical: Optional[str] = None,
    images: tuple[tuple[str, str], ...] = (),
) -> str:
    """Return a small HTML document; ``None`` omits the element entirely."""
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if meta is not None:
        head.append(f'<meta name="description" content="{meta}">')
    if canonical is not None:
        head.append(f'<link rel="canonical" href="{canonical}">')
    body = [f"<h1>{h}</h1>" for h in h1s]
    body += [f'<img src="{src}" alt="{alt}">' for src, alt in images]
    body += [f'<a href="{href}">link</a>' for href in links]
    return f"<html><head>{''.join(head)}</head><body>{''.join(body)}</body></html>"


@pytest.fixture()
def page_html() -> Callable[..., str]:
    return build_page


# ---------------------------------------------------------------------------
# Fake retrieval chain
# ---------------------------------------------------------------------------

class FakeChain:
    """Serve bodies from a dict; URLs not in it fail with ``RetrievalFailed``."""

    def __init__(self, pages: dict[str, str], gate: Optional[asyncio.Event] = None) -> None:
        self.pages = pages
        self.calls: list[str] = []
        self.gate = gate

    async def retrieve(self, url: str) -> RetrievedPage:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        body = self.pages.get(url)
        if body is None:
            raise RetrievalFailed(url, ["direct", "relay"])
        return RetrievedPage(url=url, status_code=200, body_text=body, headers={})


@pytest.fixture()
def make_chain() -> Callable[..., FakeChain]:
    return FakeChain
