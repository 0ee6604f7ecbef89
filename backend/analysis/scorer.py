"""Page score: a weighted pass/fail checklist over :class:`PageFacts`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from backend.analysis.models import PageFacts

COVERAGE_THRESHOLD = 80


@dataclass(frozen=True)
class Criterion:
    name: str
    weight: int
    check: Callable[[PageFacts], bool]


CRITERIA: tuple[Criterion, ...] = (
    Criterion("http_success", 15, lambda f: f.status.is_success),
    Criterion("title", 15, lambda f: f.title.exists and f.title.is_optimal),
    Criterion("h1", 10, lambda f: f.h1.count == 1),
    Criterion("meta_description", 15, lambda f: f.meta.exists and f.meta.is_optimal),
    Criterion("image_alt", 10, lambda f: f.images.percentage >= COVERAGE_THRESHOLD),
    Criterion("canonical", 10, lambda f: f.canonical.exists),
    Criterion("link_health", 10, lambda f: f.links.broken == 0),
    Criterion("url_shape", 15, lambda f: f.url_shape.is_short and f.url_shape.is_readable),
)

MAX_WEIGHT = sum(c.weight for c in CRITERIA)


def score_breakdown(facts: PageFacts) -> list[tuple[str, int, bool]]:
    """Return ``(criterion, weight, passed)`` for every checklist item."""
    return [(c.name, c.weight, bool(c.check(facts))) for c in CRITERIA]


def score(facts: PageFacts) -> int:
    """Return the 0–100 score of *facts*.  Pure and deterministic."""
    achieved = sum(weight for _, weight, passed in score_breakdown(facts) if passed)
    return round(100 * achieved / MAX_WEIGHT)
