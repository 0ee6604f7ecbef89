"""Tests for backend.crawler.frontier: BFS discovery over an in-memory site."""

from __future__ import annotations

import httpx
import pytest
import respx

from backend.crawler.frontier import canonicalize_url, discover, is_internal_url
from backend.errors import InvalidURL
from backend.scraper.backends import DirectBackend
from backend.scraper.fetcher import RetrievalChain
from conftest import build_page

BASE = "https://example.com/"


def _site(**links: tuple[str, ...]) -> dict[str, str]:
    """Map ``path`` keywords to pages; ``root`` is the base URL."""
    pages = {}
    for name, hrefs in links.items():
        url = BASE if name == "root" else f"{BASE}{name}"
        pages[url] = build_page(hrefs)
    return pages


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

class TestCanonicalizeUrl:
    def test_strips_fragment_and_tracking_params(self) -> None:
        url = "https://example.com/p?utm_source=nieuwsbrief&id=3&gclid=abc&fbclid=x#top"
        assert canonicalize_url(url) == "https://example.com/p?id=3"

    def test_any_utm_parameter_is_tracking(self) -> None:
        assert canonicalize_url("https://example.com/p?utm_term=x") == "https://example.com/p"

    def test_untouched_query_keeps_its_encoding(self) -> None:
        url = "https://example.com/zoeken?q=seo%20tips&page=2"
        assert canonicalize_url(url) == url

    def test_removal_keeps_the_encoding_of_other_params(self) -> None:
        plain = "https://example.com/zoeken?q=seo%20tips"
        assert canonicalize_url(f"{plain}&utm_source=nb") == plain
        assert canonicalize_url("https://example.com/zoeken?utm_source=nb&q=seo%20tips") == plain
        assert canonicalize_url(plain) == plain

    def test_variants_collapse_to_one_url(self) -> None:
        variants = {
            canonicalize_url("https://example.com/a"),
            canonicalize_url("https://example.com/a#team"),
            canonicalize_url("https://example.com/a?utm_medium=email"),
            canonicalize_url("https://example.com/a?utm_campaign=x&gclid=y#z"),
        }
        assert variants == {"https://example.com/a"}


class TestIsInternalUrl:
    def test_same_host(self) -> None:
        assert is_internal_url("https://example.com/a", BASE) is True
        assert is_internal_url("https://other.com/a", BASE) is False

    def test_subdomains_only_when_enabled(self) -> None:
        assert is_internal_url("https://blog.example.com/", BASE) is False
        assert is_internal_url("https://blog.example.com/", BASE, True) is True
        assert is_internal_url("https://example.com/", "https://www.example.com/", True) is True

    def test_suffix_must_end_on_a_label(self) -> None:
        assert is_internal_url("https://notexample.com/", BASE, True) is False

    def test_non_http_targets(self) -> None:
        assert is_internal_url("mailto:info@example.com", BASE) is False


# ---------------------------------------------------------------------------
# discover
# ---------------------------------------------------------------------------

class TestDiscover:
    async def test_breadth_first_discovery_order(self, make_chain) -> None:
        pages = _site(
            root=("/a", "/b", "https://other.com/x", "/a#section", "/c?utm_source=x"),
            a=("/d", "/"),
            b=("/e",),
            c=("/a",),
        )
        chain = make_chain(pages)
        urls = await discover(BASE, 50, fetch=chain.retrieve)
        assert urls == [
            BASE,
            f"{BASE}a",
            f"{BASE}b",
            f"{BASE}c",
            f"{BASE}d",
            f"{BASE}e",
        ]

    async def test_cap_is_respected(self, make_chain) -> None:
        pages = _site(root=tuple(f"/p{i}" for i in range(30)))
        urls = await discover(BASE, 5, fetch=make_chain(pages).retrieve)
        assert len(urls) == 5
        assert urls[0] == BASE

    async def test_cycles_terminate(self, make_chain) -> None:
        pages = _site(root=("/a",), a=("/", "/b"), b=("/a", "/"))
        chain = make_chain(pages)
        urls = await discover(BASE, 100, fetch=chain.retrieve)
        assert urls == [BASE, f"{BASE}a", f"{BASE}b"]
        # every page fetched exactly once
        assert sorted(chain.calls) == sorted(urls)

    @pytest.mark.parametrize("cap", [0, 1])
    async def test_tiny_cap_returns_seed_only(self, make_chain, cap) -> None:
        chain = make_chain(_site(root=("/a", "/b")))
        assert await discover(BASE, cap, fetch=chain.retrieve) == [BASE]
        assert chain.calls == []

    async def test_subdomains(self, make_chain) -> None:
        pages = _site(
            root=(
                "https://blog.example.com/post",
                "https://notexample.com/y",
                "https://www.example.com/z",
            )
        )
        narrow = await discover(BASE, 10, fetch=make_chain(pages).retrieve)
        wide = await discover(BASE, 10, True, fetch=make_chain(pages).retrieve)
        assert narrow == [BASE]
        assert wide == [BASE, "https://blog.example.com/post", "https://www.example.com/z"]

    async def test_failures_and_malformed_hrefs_are_skipped(self, make_chain) -> None:
        # /a is discovered but cannot be retrieved; /b still gets crawled
        pages = _site(root=("/a", "/b", "http://[broken"), b=("/c",))
        urls = await discover(BASE, 10, fetch=make_chain(pages).retrieve)
        assert urls == [BASE, f"{BASE}a", f"{BASE}b", f"{BASE}c"]

    async def test_unreachable_seed(self, make_chain) -> None:
        assert await discover(BASE, 10, fetch=make_chain({}).retrieve) == [BASE]

    async def test_rerun_is_idempotent(self, make_chain) -> None:
        pages = _site(root=("/a", "/b"), a=("/c", "/b"), b=("/a", "/c"), c=("/",))
        first = await discover(BASE, 10, fetch=make_chain(pages).retrieve)
        second = await discover(BASE, 10, fetch=make_chain(pages).retrieve)
        assert set(first) == set(second)
        assert len(first) == len(set(first))

    async def test_invalid_seed(self, make_chain) -> None:
        with pytest.raises(InvalidURL):
            await discover("example.com", 10, fetch=make_chain({}).retrieve)

    async def test_tracking_variant_of_an_encoded_query_is_one_page(self, make_chain) -> None:
        pages = _site(root=("/zoeken?q=seo%20tips", "/zoeken?q=seo%20tips&utm_source=nb"))
        urls = await discover(BASE, 10, fetch=make_chain(pages).retrieve)
        assert urls == [BASE, f"{BASE}zoeken?q=seo%20tips"]

    async def test_href_with_a_bad_port_is_dropped(self) -> None:
        html = build_page(("http://example.com:8o8o/x", "/a"))
        chain = RetrievalChain(backends=[DirectBackend()], timeout=1.0)
        with respx.mock:
            respx.get(BASE).mock(return_value=httpx.Response(200, text=html))
            respx.get(f"{BASE}a").mock(return_value=httpx.Response(200, text=build_page()))
            urls = await discover(BASE, 10, fetch=chain.retrieve)

        assert urls == [BASE, f"{BASE}a"]
