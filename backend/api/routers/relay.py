"""First-party relay: a minimal server-side pass-through fetcher.

Routes
------
GET /api/proxy?url=<target>

Response contract (consumed by ``FirstPartyRelayBackend``):

    200  {"status", "statusText", "contents", "headers"}
    400  {"error"}                 missing or malformed ``url``
    405  {"error"}                 any method other than GET / OPTIONS
    500  {"error", "message"}      upstream fetch failed or was not 2xx
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from backend.config import settings
from backend.errors import InvalidURL
from backend.scraper.urls import ensure_valid_url

router = APIRouter()

_ACCEPT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


async def _fetch_upstream(url: str) -> httpx.Response:
    async with httpx.AsyncClient(
        headers={"User-Agent": settings.relay_user_agent, **_ACCEPT_HEADERS},
        timeout=settings.relay_timeout,
        follow_redirects=True,
    ) as client:
        return await client.get(url)


@router.api_route("", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def relay_endpoint(request: Request) -> Response:
    """Fetch ``url`` server-side and return it wrapped in a JSON envelope."""
    if request.method == "OPTIONS":
        return Response(status_code=200)
    if request.method != "GET":
        return JSONResponse({"error": "Method not allowed"}, status_code=405)

    target = request.query_params.get("url")
    if not target:
        return JSONResponse({"error": "URL parameter is required"}, status_code=400)
    try:
        target = ensure_valid_url(target)
    except InvalidURL:
        return JSONResponse({"error": "Invalid URL"}, status_code=400)

    try:
        upstream = await _fetch_upstream(target)
        if not upstream.is_success:
            raise httpx.HTTPStatusError(
                f"HTTP {upstream.status_code}: {upstream.reason_phrase}",
                request=upstream.request,
                response=upstream,
            )
    except httpx.HTTPError as exc:
        print(f"[relay] ✗ {target}: {exc}")
        return JSONResponse(
            {"error": "Failed to fetch URL", "message": str(exc)},
            status_code=500,
        )

    return JSONResponse(
        {
            "status": upstream.status_code,
            "statusText": upstream.reason_phrase,
            "contents": upstream.text,
            "headers": dict(upstream.headers.items()),
        }
    )
