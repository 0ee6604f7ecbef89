"""URL inventory endpoint.

Routes
------
POST /inventory     Body: {"url", "depth", "find_images", "format": "json|csv|txt"}
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from backend.crawler.inventory import build_inventory, export_csv, export_txt, inventory_stats
from backend.errors import InvalidURL

router = APIRouter()


class InventoryRequest(BaseModel):
    url: str
    depth: int = Field(default=1, ge=1, le=5)
    find_images: bool = True
    format: Literal["json", "csv", "txt"] = "json"


@router.post("")
async def inventory_endpoint(body: InventoryRequest, request: Request) -> Any:
    """Inventory every link (and image) on the site up to ``depth`` levels."""
    session = request.app.state.session
    try:
        records = await build_inventory(
            body.url,
            fetch=session.chain.retrieve,
            depth=body.depth,
            find_images=body.find_images,
        )
    except InvalidURL as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if body.format == "csv":
        return PlainTextResponse(
            export_csv(records),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="website-urls.csv"'},
        )
    if body.format == "txt":
        return PlainTextResponse(
            export_txt(records),
            headers={"Content-Disposition": 'attachment; filename="website-urls.txt"'},
        )
    return {"stats": inventory_stats(records), "records": [asdict(r) for r in records]}
