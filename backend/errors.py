"""Exception taxonomy shared by the retrieval, analysis and crawl layers.

Missing page elements are *not* errors: the extractor reports them as absent
facts.  Only the conditions below are raised.
"""

from __future__ import annotations


class SeoMaxError(Exception):
    """Base class for every error raised by the backend."""


class InvalidURL(SeoMaxError, ValueError):
    """The supplied URL is not an absolute ``http``/``https`` URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


class RetrievalFailed(SeoMaxError):
    """Every retrieval backend was tried for *url* and none returned content."""

    def __init__(self, url: str, tried_backends: list[str]) -> None:
        tried = ", ".join(tried_backends) or "none"
        super().__init__(f"Could not retrieve {url!r} (tried: {tried})")
        self.url = url
        self.tried_backends = list(tried_backends)


class BusyRunRejected(SeoMaxError):
    """A sitewide run was requested while another one is still in flight."""

    def __init__(self) -> None:
        super().__init__("A sitewide analysis is already running on this session")


class PageAnalysisFailed(SeoMaxError):
    """Single-page analysis failed; ``cause`` holds the originating error."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Analysis of {url!r} failed: {cause}")
        self.url = url
        self.cause = cause
