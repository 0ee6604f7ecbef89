"""Utilities for rendering analysis results as plain text in the CLI."""

from __future__ import annotations

from typing import List

from backend.analysis.issues import describe_issue
from backend.analysis.models import PageAnalysis, SitewideResult
from backend.analysis.scorer import score_breakdown
from backend.crawler.inventory import UrlRecord, inventory_stats

_ICONS = {"error": "✗", "warning": "⚠", "notice": "ℹ"}


def _tick(passed: bool) -> str:
    return "✓" if passed else "✗"


def render_page_report(analysis: PageAnalysis) -> str:
    """Render one page's facts, score breakdown and issues."""
    f = analysis.facts
    lines = [
        f"URL        : {f.url}",
        f"Score      : {analysis.score}/100",
        f"HTTP       : {f.status.status_code}"
        + ("  (noindex)" if f.status.noindex else ""),
        f"Title      : {f.title.text or '(none)'}  [{f.title.length} chars]",
        f"H1         : {f.h1.count} found"
        + (f" - {f.h1.texts[0]!r}" if f.h1.texts else ""),
        f"Meta desc. : {f.meta.length} chars" if f.meta.exists else "Meta desc. : (none)",
        f"Images     : {f.images.with_alt}/{f.images.total} with alt ({f.images.percentage}%)",
        f"Canonical  : {f.canonical.url or '(none)'}",
        f"Links      : {f.links.internal} internal, {f.links.external} external, "
        f"{f.links.broken} broken (of {f.links.total_seen})",
        f"URL shape  : {f.url_shape.length} chars, depth {f.url_shape.depth}",
    ]
    if f.keyword:
        lines.append(
            f"Keyword    : {f.keyword!r} in title={f.title.has_keyword} "
            f"h1={f.h1.keyword_present}"
        )

    lines.append("")
    lines.append("Checklist:")
    for name, weight, passed in score_breakdown(f):
        lines.append(f"  {_tick(passed)} {name:<18} {weight:>3}")

    if analysis.issues:
        lines.append("")
        lines.append("Issues:")
        for issue in analysis.issues:
            lines.append(f"  {_ICONS.get(issue.type, '-')} {issue.message}")
            lines.append(f"      → {describe_issue(issue.message).steps[0]}")

    if f.images.missing_alt:
        lines.append("")
        lines.append("Images without alt text:")
        for img in f.images.missing_alt:
            lines.append(f"  - {img.filename}  ({img.full_url})")

    return "\n".join(lines)


def render_sitewide(result: SitewideResult) -> str:
    """Render the sitewide overview, top issues, recommendations and pages."""
    lines = [
        f"Pages analysed : {result.total_pages}",
        f"Successful     : {result.successful_pages}",
        f"Average score  : {result.average_score}/100",
    ]
    if result.stopped:
        lines.append("(stopped before all pages were analysed)")

    if result.issues:
        lines.append("")
        lines.append("Top issues:")
        for issue in result.issues:
            lines.append(
                f"  {_ICONS.get(issue.type, '-')} {issue.message}  ×{issue.count}"
            )

    if result.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        for rec in result.recommendations:
            lines.append(f"  {rec}")

    lines.append("")
    lines.append("Pages:")
    for page in result.pages:
        if page.error:
            lines.append(f"  {'ERR':>4}  {page.url}  ({page.error})")
        else:
            lines.append(f"  {page.score:>4}  {page.url}")
    return "\n".join(lines)


def render_inventory(records: List[UrlRecord]) -> str:
    stats = inventory_stats(records)
    lines = [
        f"{stats['total']} URLs  ({stats['internal']} internal, "
        f"{stats['external']} external, {stats['images']} images)",
    ]
    for r in records:
        flag = "int" if r.internal else "ext"
        seen = f"  ×{len(r.found_on_pages)}" if len(r.found_on_pages) > 1 else ""
        lines.append(f"  [{r.kind:<5}|{flag}] {r.url}{seen}")
    return "\n".join(lines)
