"""Retrieval backends: the direct request plus the relays tried after it.

Each backend knows two things: which URL to request for a given target, and
how to turn the HTTP response it receives into a :class:`RetrievedPage`.
The relays disagree about their response envelope:

  * direct / cors-anywhere / thingproxy: raw body with the origin's status
    and headers.
  * first-party relay (``/api/proxy``): JSON ``{status, contents, headers}``.
  * AllOrigins: JSON ``{contents, status: {http_code}}`` and no headers.

``normalize`` hides those differences.  It returns ``None`` when the envelope
carries no usable content so the chain moves on to the next backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx

from backend.config import settings
from backend.scraper.models import RetrievedPage


def _lower_headers(headers: Any) -> dict[str, str]:
    if not headers:
        return {}
    try:
        items = headers.items()
    except AttributeError:
        return {}
    return {str(k).lower(): str(v) for k, v in items}


def _status_code(value: Any) -> int | None:
    """Coerce an envelope status to an int; ``None`` when it is not numeric."""
    if isinstance(value, bool):
        return None
    try:
        return int(value or 200)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class RetrievalBackend(ABC):
    """One way of getting a page's body across the cross-origin barrier."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name (reported in ``RetrievalFailed``)."""

    @abstractmethod
    def request_url(self, url: str) -> str:
        """Return the URL to GET in order to retrieve *url*."""

    @abstractmethod
    def normalize(self, url: str, response: httpx.Response) -> RetrievedPage | None:
        """Convert a 2xx *response* into a :class:`RetrievedPage`."""

    def request_headers(self) -> dict[str, str]:
        return {}


# ---------------------------------------------------------------------------
# Raw pass-through backends
# ---------------------------------------------------------------------------

class DirectBackend(RetrievalBackend):
    """Request the target itself."""

    @property
    def name(self) -> str:
        return "direct"

    def request_url(self, url: str) -> str:
        return url

    def request_headers(self) -> dict[str, str]:
        return {"User-Agent": settings.user_agent}

    def normalize(self, url: str, response: httpx.Response) -> RetrievedPage | None:
        return RetrievedPage(
            url=url,
            status_code=response.status_code,
            body_text=response.text,
            headers=_lower_headers(response.headers),
            backend=self.name,
        )


class PrefixRelayBackend(DirectBackend):
    """Public relay that takes the target appended verbatim to its own URL."""

    def __init__(self, name: str, prefix: str) -> None:
        self._name = name
        self._prefix = prefix

    @property
    def name(self) -> str:
        return self._name

    def request_url(self, url: str) -> str:
        return f"{self._prefix}{url}"

    def request_headers(self) -> dict[str, str]:
        return {}


# ---------------------------------------------------------------------------
# JSON-envelope backends
# ---------------------------------------------------------------------------

class FirstPartyRelayBackend(RetrievalBackend):
    """Our own pass-through service (see ``backend.api.routers.relay``)."""

    def __init__(self, endpoint: str) -> None:
        self._endpoint = endpoint

    @property
    def name(self) -> str:
        return "relay"

    def request_url(self, url: str) -> str:
        sep = "&" if "?" in self._endpoint else "?"
        return f"{self._endpoint}{sep}url={quote(url, safe='')}"

    def normalize(self, url: str, response: httpx.Response) -> RetrievedPage | None:
        data = response.json()
        contents = data.get("contents") if isinstance(data, dict) else None
        if not contents or not isinstance(contents, str):
            return None
        status_code = _status_code(data.get("status"))
        if status_code is None:
            return None
        return RetrievedPage(
            url=url,
            status_code=status_code,
            body_text=contents,
            headers=_lower_headers(data.get("headers")),
            backend=self.name,
        )


class AllOriginsBackend(RetrievalBackend):
    """``api.allorigins.win/get``: body wrapped in JSON, headers dropped."""

    endpoint = "https://api.allorigins.win/get"

    @property
    def name(self) -> str:
        return "allorigins"

    def request_url(self, url: str) -> str:
        return f"{self.endpoint}?url={quote(url, safe='')}"

    def normalize(self, url: str, response: httpx.Response) -> RetrievedPage | None:
        data = response.json()
        contents = data.get("contents") if isinstance(data, dict) else None
        if not contents or not isinstance(contents, str):
            return None
        status = data.get("status")
        status_code = _status_code(status.get("http_code") if isinstance(status, dict) else None)
        if status_code is None:
            return None
        return RetrievedPage(
            url=url,
            status_code=status_code,
            body_text=contents,
            headers={},
            backend=self.name,
        )


# ---------------------------------------------------------------------------
# Default backend order
# ---------------------------------------------------------------------------

def build_default_backends() -> list[RetrievalBackend]:
    """Direct → first-party relay (if configured) → public relays (if enabled)."""
    backends: list[RetrievalBackend] = [DirectBackend()]
    if settings.relay_url:
        backends.append(FirstPartyRelayBackend(settings.relay_url))
    if settings.public_relays_enabled:
        backends.append(AllOriginsBackend())
        backends.append(
            PrefixRelayBackend("cors-anywhere", "https://cors-anywhere.herokuapp.com/")
        )
        backends.append(
            PrefixRelayBackend("thingproxy", "https://thingproxy.freeboard.io/fetch/")
        )
    return backends
