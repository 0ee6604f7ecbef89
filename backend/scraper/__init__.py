"""Scraper package: resilient page retrieval across relay backends."""

from backend.scraper.backends import (
    AllOriginsBackend,
    DirectBackend,
    FirstPartyRelayBackend,
    PrefixRelayBackend,
    RetrievalBackend,
    build_default_backends,
)
from backend.scraper.fetcher import RetrievalChain, retrieve
from backend.scraper.models import RetrievedPage

__all__ = [
    "retrieve",
    "RetrievalChain",
    "RetrievedPage",
    "RetrievalBackend",
    "DirectBackend",
    "FirstPartyRelayBackend",
    "AllOriginsBackend",
    "PrefixRelayBackend",
    "build_default_backends",
]
