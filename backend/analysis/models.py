"""Dataclass models for page facts, issues and sitewide results.

Fact records are frozen: once the extractor produces them nobody mutates
them.  ``Issue`` is the one mutable record; the sitewide fold updates it and
then hands it off read-only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, List, Literal, Optional, Tuple

IssueType = Literal["error", "warning", "notice"]


# ---------------------------------------------------------------------------
# Page facts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusFacts:
    status_code: int
    is_success: bool
    noindex: bool
    nofollow: bool


@dataclass(frozen=True)
class TitleFacts:
    exists: bool
    text: str
    length: int
    is_optimal: bool
    has_keyword: Optional[bool]


@dataclass(frozen=True)
class H1Facts:
    count: int
    texts: Tuple[str, ...]
    is_optimal: bool
    keyword_present: Optional[bool]


@dataclass(frozen=True)
class MetaFacts:
    exists: bool
    text: str
    length: int
    is_optimal: bool
    noindex: bool
    nofollow: bool


@dataclass(frozen=True)
class MissingAltImage:
    filename: str
    src: str
    full_url: str


@dataclass(frozen=True)
class ImageFacts:
    total: int
    with_alt: int
    without_alt: int
    percentage: int
    missing_alt: Tuple[MissingAltImage, ...] = ()


@dataclass(frozen=True)
class CanonicalFacts:
    exists: bool
    url: Optional[str]
    is_self_referencing: bool
    is_valid: bool


@dataclass(frozen=True)
class LinkFacts:
    total_seen: int
    internal: int
    external: int
    broken: int
    checked_count: int


@dataclass(frozen=True)
class UrlShapeFacts:
    length: int
    is_short: bool
    has_params: bool
    depth: int
    is_readable: bool
    protocol: str


@dataclass(frozen=True)
class PageFacts:
    """Everything the extractor learned about one page."""

    url: str
    keyword: str
    status: StatusFacts
    title: TitleFacts
    h1: H1Facts
    meta: MetaFacts
    images: ImageFacts
    canonical: CanonicalFacts
    links: LinkFacts
    url_shape: UrlShapeFacts

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageIssue:
    type: IssueType
    message: str


@dataclass
class Issue:
    """A sitewide issue: one message, every page that reported it."""

    type: IssueType
    message: str
    count: int = 1
    affected_urls: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class IssueGuide:
    description: str
    steps: Tuple[str, ...]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageAnalysis:
    """Result of a single-page analysis."""

    facts: PageFacts
    score: int
    issues: Tuple[PageIssue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PageResult:
    """One row of a sitewide run.  ``error`` is set for degraded entries."""

    url: str
    keyword: str = ""
    score: int = 0
    issues: List[PageIssue] = field(default_factory=list)
    error: Optional[str] = None
    facts: Optional[PageFacts] = None
    title: str = ""
    h1: str = ""
    meta_description: str = ""
    analyzed_at: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SitewideResult:
    total_pages: int
    successful_pages: int
    average_score: int
    issues: List[Issue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    pages: List[PageResult] = field(default_factory=list)
    stopped: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
