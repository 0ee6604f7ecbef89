"""Single-page analysis and issue guide endpoints.

Routes
------
POST /analyze           Body: {"url": "https://...", "keyword": "..."}
GET  /analyze/guide     ?message=<issue message>  → description + steps
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from backend.analysis.issues import describe_issue
from backend.analysis.scorer import score_breakdown
from backend.errors import InvalidURL, PageAnalysisFailed

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    url: str
    keyword: str = ""


class IssueGuideResponse(BaseModel):
    message: str
    description: str
    steps: list[str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("")
async def analyze_endpoint(body: AnalyzeRequest, request: Request) -> dict[str, Any]:
    """Analyse one page and return its facts, score and issues."""
    session = request.app.state.session
    try:
        analysis = await session.analyze_page(body.url, body.keyword)
    except InvalidURL as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PageAnalysisFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    payload = analysis.to_dict()
    payload["breakdown"] = [
        {"criterion": name, "weight": weight, "passed": passed}
        for name, weight, passed in score_breakdown(analysis.facts)
    ]
    return payload


@router.get("/guide", response_model=IssueGuideResponse)
def issue_guide_endpoint(message: str) -> dict[str, Any]:
    """Explain an issue message and list the steps to fix it."""
    guide = describe_issue(message)
    return {"message": message, "description": guide.description, "steps": list(guide.steps)}
