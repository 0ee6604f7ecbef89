"""Sitewide analysis endpoints, plain JSON and Server-Sent Events.

Routes
------
POST /sitewide          Body: {"url", "keyword", "max_pages", "include_subdomains"}
POST /sitewide/stream   Same body; streams progress as SSE
POST /sitewide/stop     Ask the running analysis to stop after the current page

SSE event format
----------------
Each event is a JSON-encoded object on the ``data:`` line::

    data: {"event": "progress", "percent": 40.0, "status": "Analysing /about"}

    data: {"event": "done", "result": {...}}

    data: {"event": "error", "detail": "..."}
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from backend.errors import BusyRunRejected, InvalidURL
from backend.session import AnalysisSession

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class SitewideRequest(BaseModel):
    url: str
    keyword: str = ""
    max_pages: Optional[int] = None
    include_subdomains: bool = False


# ---------------------------------------------------------------------------
# SSE helpers
# ---------------------------------------------------------------------------

def _sse(payload: dict[str, Any]) -> str:
    """Format a payload dict as a single SSE ``data:`` line."""
    return f"data: {json.dumps(payload)}\n\n"


async def _sitewide_sse_generator(
    session: AnalysisSession,
    body: SitewideRequest,
) -> AsyncIterator[str]:
    """Yield SSE-formatted strings for the duration of a sitewide run."""
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    def on_progress(percent: float, status: str) -> None:
        queue.put_nowait(_sse({"event": "progress", "percent": percent, "status": status}))

    async def run() -> None:
        try:
            result = await session.run_sitewide(
                body.url,
                body.keyword,
                max_pages=body.max_pages,
                include_subdomains=body.include_subdomains,
                on_progress=on_progress,
            )
            queue.put_nowait(_sse({"event": "done", "result": result.to_dict()}))
        except Exception as exc:  # noqa: BLE001
            queue.put_nowait(_sse({"event": "error", "detail": str(exc)}))
        finally:
            queue.put_nowait(None)  # sentinel

    task = asyncio.create_task(run())
    try:
        while True:
            item = await queue.get()
            if item is None:
                break
            yield item
    finally:
        await asyncio.shield(task)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("")
async def sitewide_endpoint(body: SitewideRequest, request: Request) -> dict[str, Any]:
    """Crawl the site, analyse every discovered page and return the summary."""
    session: AnalysisSession = request.app.state.session
    try:
        result = await session.run_sitewide(
            body.url,
            body.keyword,
            max_pages=body.max_pages,
            include_subdomains=body.include_subdomains,
        )
    except BusyRunRejected as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidURL as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return result.to_dict()


@router.post("/stream")
async def sitewide_stream_endpoint(body: SitewideRequest, request: Request) -> StreamingResponse:
    """Run a sitewide analysis and stream its progress as SSE.

    - ``progress`` — emitted before each page and at completion.
    - ``done``     — emitted at the end with the full result.
    - ``error``    — emitted if the run is rejected or fails.
    """
    session: AnalysisSession = request.app.state.session
    if session.is_running:
        raise HTTPException(status_code=409, detail=str(BusyRunRejected()))
    return StreamingResponse(
        _sitewide_sse_generator(session, body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",   # disable nginx proxy buffering
        },
    )


@router.post("/stop", status_code=202)
def sitewide_stop_endpoint(request: Request) -> dict[str, bool]:
    session: AnalysisSession = request.app.state.session
    running = session.is_running
    session.stop()
    return {"stopping": running}
