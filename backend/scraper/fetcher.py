"""Resilient page retrieval across an ordered list of backends.

``RetrievalChain.retrieve`` tries each backend once, in order, and returns
the first normalised :class:`RetrievedPage`.  A network error, a timeout, a
non-2xx status or an envelope without content advances to the next backend.
When every backend has been tried the chain raises
:class:`~backend.errors.RetrievalFailed`.  There is no retry or backoff
within one call.
"""

from __future__ import annotations

import httpx

from backend.config import settings
from backend.errors import RetrievalFailed
from backend.scraper.backends import RetrievalBackend, build_default_backends
from backend.scraper.models import RetrievedPage
from backend.scraper.urls import ensure_valid_url


class RetrievalChain:
    """Try backends in order; return the first page one of them delivers.

    Args:
        backends: Ordered backends.  Defaults to
            :func:`~backend.scraper.backends.build_default_backends`.
        client: Optional shared ``httpx.AsyncClient``.  When omitted each
            ``retrieve`` call opens (and closes) its own client.
        timeout: Per-attempt timeout in seconds.
    """

    def __init__(
        self,
        backends: list[RetrievalBackend] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._backends = backends if backends is not None else build_default_backends()
        self._client = client
        self._timeout = timeout if timeout is not None else settings.request_timeout

    @property
    def backends(self) -> list[RetrievalBackend]:
        return list(self._backends)

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        backend: RetrievalBackend,
        url: str,
    ) -> RetrievedPage | None:
        response = await client.get(
            backend.request_url(url),
            headers=backend.request_headers(),
            timeout=self._timeout,
        )
        if not response.is_success:
            print(f"[retrieve] {backend.name} answered HTTP {response.status_code} for {url}")
            return None
        return backend.normalize(url, response)

    async def _run(self, client: httpx.AsyncClient, url: str) -> RetrievedPage:
        tried: list[str] = []
        for backend in self._backends:
            tried.append(backend.name)
            try:
                page = await self._attempt(client, backend, url)
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
                print(f"[retrieve] {backend.name} failed for {url}: {exc!r:.120}")
                continue
            if page is not None:
                if len(tried) > 1:
                    print(f"[retrieve] ✓ {url} via {backend.name}")
                return page
            print(f"[retrieve] {backend.name} returned no content for {url}")
        raise RetrievalFailed(url, tried)

    async def retrieve(self, url: str) -> RetrievedPage:
        """Fetch *url* through the first backend that succeeds.

        Raises:
            InvalidURL: *url* is not an absolute http(s) URL.
            RetrievalFailed: every backend was exhausted.
        """
        url = ensure_valid_url(url)
        if self._client is not None:
            return await self._run(self._client, url)
        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._run(client, url)


async def retrieve(url: str) -> RetrievedPage:
    """Retrieve *url* with the default backend chain."""
    return await RetrievalChain().retrieve(url)
