"""SEO-MAX CLI: entry-point for all analysis operations.

Usage:
    python cli/main.py --help

Commands:
    analyze   → single-page facts, score and issues
    sitewide  → crawl the site, score every page, aggregate issues
    discover  → list the internal pages a sitewide run would analyse
    crawl     → link / image inventory with CSV or TXT export
    serve     → run the HTTP API (including the first-party relay)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Optional

import typer

from backend.config import settings
from backend.crawler.inventory import build_inventory, export_csv, export_txt
from backend.errors import SeoMaxError
from backend.session import AnalysisSession
from cli.rendering import render_inventory, render_page_report, render_sitewide

app = typer.Typer(
    name="seo-max",
    help="SEO-MAX on-page analyser CLI.",
    no_args_is_help=True,
)


def _fail(tag: str, exc: Exception) -> None:
    typer.echo(f"[{tag}] ✗ {exc}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Single page
# ---------------------------------------------------------------------------
@app.command("analyze")
def analyze(
    url: str = typer.Option(..., help="URL of the page to analyse."),
    keyword: str = typer.Option("", help="Optional focus keyword."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Analyse one page and print its SEO facts, score and issues."""
    session = AnalysisSession()
    typer.echo(f"[analyze] Fetching {url!r} …")
    try:
        analysis = asyncio.run(session.analyze_page(url, keyword))
    except SeoMaxError as exc:
        _fail("analyze", exc)

    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
    else:
        typer.echo(render_page_report(analysis))


# ---------------------------------------------------------------------------
# Sitewide
# ---------------------------------------------------------------------------
@app.command("sitewide")
def sitewide(
    url: str = typer.Option(..., help="Base URL of the site."),
    keyword: str = typer.Option("", help="Optional focus keyword."),
    max_pages: int = typer.Option(
        settings.sitewide_max_pages, "--max-pages", help="Maximum pages to analyse."
    ),
    include_subdomains: bool = typer.Option(
        False, "--include-subdomains", help="Treat subdomains as internal."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Discover the site's pages, analyse each, and print the summary."""
    session = AnalysisSession()

    def on_progress(percent: float, status: str) -> None:
        typer.echo(f"[sitewide] {percent:5.1f}%  {status}")

    try:
        result = asyncio.run(
            session.run_sitewide(
                url,
                keyword,
                max_pages=max_pages,
                include_subdomains=include_subdomains,
                on_progress=None if as_json else on_progress,
            )
        )
    except SeoMaxError as exc:
        _fail("sitewide", exc)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        typer.echo("")
        typer.echo(render_sitewide(result))


@app.command("discover")
def discover_cmd(
    url: str = typer.Option(..., help="Base URL of the site."),
    max_pages: int = typer.Option(
        settings.sitewide_max_pages, "--max-pages", help="Maximum URLs to return."
    ),
    include_subdomains: bool = typer.Option(
        False, "--include-subdomains", help="Treat subdomains as internal."
    ),
) -> None:
    """List the internal pages reachable from a base URL."""
    session = AnalysisSession()
    try:
        urls = asyncio.run(session.discover(url, max_pages, include_subdomains))
    except SeoMaxError as exc:
        _fail("discover", exc)
    for found in urls:
        typer.echo(found)


# ---------------------------------------------------------------------------
# URL inventory
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    url: str = typer.Option(..., help="Base URL to crawl."),
    depth: int = typer.Option(1, help="Crawl depth (1 = base page only)."),
    images: bool = typer.Option(True, "--images/--no-images", help="Include images."),
    export: Optional[str] = typer.Option(None, help="Export format: csv | txt."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write export to file."),
) -> None:
    """Inventory every link (and image) found on the site."""
    if export not in (None, "csv", "txt"):
        typer.echo(f"[crawl] Unknown export format {export!r}. Use: csv | txt")
        raise typer.Exit(1)

    session = AnalysisSession()
    try:
        records = asyncio.run(
            build_inventory(url, fetch=session.chain.retrieve, depth=depth, find_images=images)
        )
    except SeoMaxError as exc:
        _fail("crawl", exc)

    if export is None:
        typer.echo(render_inventory(records))
        return

    content = export_csv(records) if export == "csv" else export_txt(records)
    if output is None:
        typer.echo(content)
    else:
        output.write_text(content, encoding="utf-8")
        typer.echo(f"[crawl] {len(records)} URL(s) written to {output}")


# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Port."),
) -> None:
    """Run the HTTP API (analysis endpoints and the /api/proxy relay)."""
    import uvicorn  # noqa: PLC0415

    uvicorn.run("backend.api.app:app", host=host, port=port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
