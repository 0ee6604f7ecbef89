"""Analysis package: fact extraction, scoring, issues and the result cache."""

from backend.analysis.cache import ResultCache
from backend.analysis.extractor import clean_heading_text, extract
from backend.analysis.issues import describe_issue, page_issues
from backend.analysis.models import PageAnalysis, PageFacts, SitewideResult
from backend.analysis.scorer import score

__all__ = [
    "extract",
    "clean_heading_text",
    "score",
    "page_issues",
    "describe_issue",
    "ResultCache",
    "PageFacts",
    "PageAnalysis",
    "SitewideResult",
]
