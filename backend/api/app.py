"""FastAPI application factory.

Lifespan
--------
On startup the app creates one :class:`~backend.session.AnalysisSession`
(shared across requests via ``request.app.state.session``), so single-page
lookups and sitewide runs share the same result cache and busy flag.  On
shutdown the session's cache is cleared.

Routers
-------
All endpoint groups are mounted under their respective path prefix:

    /analyze    — single-page analysis and issue guide
    /sitewide   — sitewide crawl-and-score (JSON and SSE streaming)
    /inventory  — link / image inventory with CSV and TXT export
    /api/proxy  — first-party relay used by the retrieval chain
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.session import AnalysisSession

from backend.api.routers import analyze as analyze_router
from backend.api.routers import inventory as inventory_router
from backend.api.routers import relay as relay_router
from backend.api.routers import sitewide as sitewide_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the analysis session on startup and drop its cache on shutdown."""
    session = AnalysisSession()
    app.state.session = session
    try:
        yield
    finally:
        session.cache.clear()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="SEO-MAX API",
        description=(
            "REST interface for the SEO-MAX on-page analyser. "
            "Exposes single-page analysis, sitewide crawl-and-score with "
            "Server-Sent Events progress, URL inventory export, "
            "and the first-party CORS relay."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (the relay exists for them).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(analyze_router.router, prefix="/analyze", tags=["analyze"])
    app.include_router(sitewide_router.router, prefix="/sitewide", tags=["sitewide"])
    app.include_router(inventory_router.router, prefix="/inventory", tags=["inventory"])
    app.include_router(relay_router.router, prefix="/api/proxy", tags=["relay"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
