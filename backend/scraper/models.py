"""Data models for the retrieval pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class RetrievedPage:
    """A fetched URL, normalised to the same shape whichever backend served it.

    ``headers`` keys are lower-cased; relays that do not forward the origin's
    headers produce an empty mapping.
    """

    url: str
    status_code: int
    body_text: str
    headers: Dict[str, str] = field(default_factory=dict)
    backend: str = "direct"

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
