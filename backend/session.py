"""Analysis session: single-page analysis and sitewide runs.

An :class:`AnalysisSession` owns its own :class:`ResultCache`, its
:class:`RetrievalChain` and the busy flag that keeps sitewide runs from
overlapping.  Construct one per analysis context (CLI invocation, API app)
and pass it to whoever needs it; nothing here is module-global.

``analyze_page`` and ``run_sitewide`` are the two entry points consumed by
the presentation layers (``cli`` and ``backend.api``).
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlsplit

from backend.analysis.cache import ResultCache
from backend.analysis.extractor import extract
from backend.analysis.issues import (
    TOP_ISSUES,
    fold_issues,
    generate_recommendations,
    page_issues,
    rank_issues,
)
from backend.analysis.models import PageAnalysis, PageResult, SitewideResult
from backend.analysis.scorer import score
from backend.config import settings
from backend.crawler.frontier import discover
from backend.errors import BusyRunRejected, PageAnalysisFailed, RetrievalFailed
from backend.scraper.fetcher import RetrievalChain
from backend.scraper.urls import ensure_valid_url

ProgressCallback = Callable[[float, str], None]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _short_url(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    return parts.path + (f"?{parts.query}" if parts.query else "") or "/"


def _report(callback: Optional[ProgressCallback], percent: float, status: str) -> None:
    if callback is not None:
        callback(round(percent, 1), status)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate(pages: Iterable[PageResult], stopped: bool = False) -> SitewideResult:
    """Fold per-page results into a :class:`SitewideResult`.

    Degraded pages count towards ``total_pages`` only.  With no successful
    page the average is 0 and there are no issues or recommendations.
    """
    pages = list(pages)
    successful = [p for p in pages if p.ok]
    if not successful:
        return SitewideResult(
            total_pages=len(pages),
            successful_pages=0,
            average_score=0,
            pages=pages,
            stopped=stopped,
        )

    average = round(sum(p.score for p in successful) / len(successful))
    ranked = rank_issues(fold_issues(successful))
    return SitewideResult(
        total_pages=len(pages),
        successful_pages=len(successful),
        average_score=average,
        issues=ranked[:TOP_ISSUES],
        recommendations=generate_recommendations(ranked, average),
        pages=pages,
        stopped=stopped,
    )


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class AnalysisSession:
    """Owns the cache, retrieval chain and busy flag for one analysis context.

    Args:
        chain: Retrieval chain; defaults to the configured backend order.
        cache: Result cache; a fresh one per session by default.
        concurrency: Pages analysed at once during a sitewide run.  ``1``
            (the default from ``settings.sitewide_concurrency``) processes
            pages strictly one after another in discovery order.
    """

    def __init__(
        self,
        chain: RetrievalChain | None = None,
        cache: ResultCache | None = None,
        concurrency: int | None = None,
    ) -> None:
        self.chain = chain if chain is not None else RetrievalChain()
        self.cache = cache if cache is not None else ResultCache()
        self.concurrency = max(1, concurrency or settings.sitewide_concurrency)
        self._running = False
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Ask the running sitewide analysis to stop after the current page."""
        if self._running:
            self._stop_requested = True

    # ------------------------------------------------------------------
    # Single page
    # ------------------------------------------------------------------
    async def analyze_page(self, url: str, keyword: str = "") -> PageAnalysis:
        """Retrieve, extract and score one page (cached for ``cache.ttl``).

        Raises:
            InvalidURL: *url* is malformed.
            PageAnalysisFailed: no backend could retrieve the page; the
                :class:`RetrievalFailed` is available as ``cause``.
        """
        url = ensure_valid_url(url)
        facts = self.cache.get(url, keyword)
        if facts is not None:
            print(f"[analyze] Using cached results for {url}")
        else:
            try:
                page = await self.chain.retrieve(url)
            except RetrievalFailed as exc:
                raise PageAnalysisFailed(url, exc) from exc
            facts = extract(
                page.body_text,
                url,
                keyword,
                status_code=page.status_code,
                headers=page.headers,
            )
            self.cache.put(url, keyword, facts)
        return PageAnalysis(facts=facts, score=score(facts), issues=tuple(page_issues(facts)))

    async def discover(
        self,
        base_url: str,
        max_pages: int | None = None,
        include_subdomains: bool = False,
    ) -> List[str]:
        """Discover internal pages of *base_url* through this session's chain."""
        cap = settings.sitewide_max_pages if max_pages is None else max_pages
        return await discover(base_url, cap, include_subdomains, fetch=self.chain.retrieve)

    # ------------------------------------------------------------------
    # Sitewide
    # ------------------------------------------------------------------
    async def _analyze_for_run(self, url: str, keyword: str) -> PageResult:
        try:
            analysis = await self.analyze_page(url, keyword)
        except Exception as exc:
            print(f"[sitewide] ✗ Failed {url!r}: {exc}")
            return PageResult(url=url, keyword=keyword, score=0, error=str(exc), analyzed_at=_now())

        facts = analysis.facts
        return PageResult(
            url=url,
            keyword=keyword,
            score=analysis.score,
            issues=list(analysis.issues),
            facts=facts,
            title=facts.title.text,
            h1=facts.h1.texts[0] if facts.h1.texts else "",
            meta_description=facts.meta.text,
            analyzed_at=_now(),
        )

    async def _analyze_sequential(
        self,
        urls: List[str],
        keyword: str,
        on_progress: Optional[ProgressCallback],
    ) -> List[PageResult]:
        pages: List[PageResult] = []
        for index, url in enumerate(urls):
            if self._stop_requested:
                print(f"[sitewide] Stop requested; {len(urls) - index} page(s) skipped.")
                break
            _report(on_progress, index / len(urls) * 100, f"Analysing {_short_url(url)}")
            pages.append(await self._analyze_for_run(url, keyword))
        return pages

    async def _analyze_pooled(
        self,
        urls: List[str],
        keyword: str,
        on_progress: Optional[ProgressCallback],
    ) -> List[PageResult]:
        semaphore = asyncio.Semaphore(self.concurrency)
        completed = 0

        async def worker(url: str) -> Optional[PageResult]:
            nonlocal completed
            async with semaphore:
                if self._stop_requested:
                    return None
                result = await self._analyze_for_run(url, keyword)
            completed += 1
            _report(on_progress, completed / len(urls) * 100, f"Analysed {_short_url(url)}")
            return result

        results = await asyncio.gather(*(worker(u) for u in urls))
        return [r for r in results if r is not None]

    async def run_sitewide(
        self,
        base_url: str,
        keyword: str = "",
        max_pages: int | None = None,
        include_subdomains: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SitewideResult:
        """Discover the site's pages, analyse each one and aggregate.

        A page that fails is recorded as a degraded entry (``score`` 0,
        ``error`` set) and the run carries on.

        Raises:
            BusyRunRejected: another run is in flight on this session.
            InvalidURL: *base_url* is malformed.
        """
        if self._running:
            raise BusyRunRejected()
        self._running = True
        self._stop_requested = False
        try:
            base_url = ensure_valid_url(base_url)
            _report(on_progress, 0, "Discovering pages …")
            urls = await self.discover(base_url, max_pages, include_subdomains)
            print(f"[sitewide] Analysing {len(urls)} page(s) for {base_url}")

            if self.concurrency > 1:
                pages = await self._analyze_pooled(urls, keyword, on_progress)
            else:
                pages = await self._analyze_sequential(urls, keyword, on_progress)

            result = aggregate(pages, stopped=self._stop_requested)
            _report(on_progress, 100, "Sitewide analysis complete")
            print(
                f"[sitewide] Done: {result.successful_pages}/{result.total_pages} page(s), "
                f"average score {result.average_score}."
            )
            return result
        finally:
            self._running = False
            self._stop_requested = False
