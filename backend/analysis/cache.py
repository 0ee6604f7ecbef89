"""Short-lived memo of ``(url, keyword) → PageFacts``.

Entries expire after ``settings.cache_ttl`` seconds.  There is no background
timer: expired entries are dropped when read, and each ``get`` has a small
random chance of sweeping the whole map.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from backend.analysis.models import PageFacts
from backend.config import settings

CacheKey = tuple[str, str]


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    facts: PageFacts
    created_at: float


def _key(url: str, keyword: str) -> CacheKey:
    return (url, (keyword or "").strip())


class ResultCache:
    """TTL cache shared by single-page and sitewide analysis on one session."""

    def __init__(
        self,
        ttl: float | None = None,
        sweep_chance: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.ttl = settings.cache_ttl if ttl is None else ttl
        self.sweep_chance = settings.cache_sweep_chance if sweep_chance is None else sweep_chance
        self._clock = clock
        self._rng = rng
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl

    def get(self, url: str, keyword: str = "") -> Optional[PageFacts]:
        """Return cached facts, or ``None`` on a miss or an expired entry."""
        if self._rng() < self.sweep_chance:
            self.sweep()
        key = _key(url, keyword)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry.facts

    def put(self, url: str, keyword: str, facts: PageFacts) -> None:
        key = _key(url, keyword)
        with self._lock:
            self._entries[key] = CacheEntry(key=key, facts=facts, created_at=self._clock())

    def sweep(self) -> int:
        """Drop every expired entry; return how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if self._expired(e, now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
