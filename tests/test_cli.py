"""Tests for the seo-max CLI commands."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from backend.analysis.cache import ResultCache
from backend.session import AnalysisSession
from cli.main import app
from conftest import build_page

runner = CliRunner()

BASE = "https://example.com/"


@pytest.fixture
def site(monkeypatch, make_chain):
    """Make every ``AnalysisSession()`` the CLI builds read from *pages*."""

    def _install(pages: dict[str, str]):
        chain = make_chain(pages)
        monkeypatch.setattr(
            "cli.main.AnalysisSession",
            lambda: AnalysisSession(chain=chain, cache=ResultCache(ttl=300, sweep_chance=0.0)),
        )
        return chain

    return _install


def _pages() -> dict[str, str]:
    return {
        BASE: build_page(("/a", "/b", "/c"), meta=None, images=(("/img/hero.jpg", ""),)),
        f"{BASE}a": build_page(meta=None),
        f"{BASE}b": build_page(meta=None),
    }


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

def test_analyze_report(site):
    site({BASE: build_page(canonical=BASE)})
    result = runner.invoke(app, ["analyze", "--url", BASE, "--keyword", "audit"])
    assert result.exit_code == 0
    assert "Score      : 100/100" in result.stdout
    assert "H1         : 1 found - 'Welkom'" in result.stdout
    assert "Checklist:" in result.stdout
    assert "in title=True" in result.stdout


def test_analyze_lists_issues_and_images(site):
    site(_pages())
    result = runner.invoke(app, ["analyze", "--url", BASE])
    assert result.exit_code == 0
    assert "Meta description ontbreekt" in result.stdout
    assert "1 afbeeldingen zonder alt-text" in result.stdout
    assert "hero.jpg  (https://example.com/img/hero.jpg)" in result.stdout


def test_analyze_json(site):
    site({BASE: build_page(canonical=BASE)})
    result = runner.invoke(app, ["analyze", "--url", BASE, "--json"])
    assert result.exit_code == 0
    assert '"score": 100' in result.stdout


def test_analyze_unreachable_exits_1(site):
    site({})
    result = runner.invoke(app, ["analyze", "--url", BASE])
    assert result.exit_code == 1
    assert "[analyze] ✗" in result.stdout


def test_analyze_invalid_url_exits_1(site):
    site({})
    result = runner.invoke(app, ["analyze", "--url", "example.com"])
    assert result.exit_code == 1
    assert "Invalid URL" in result.stdout


# ---------------------------------------------------------------------------
# sitewide / discover
# ---------------------------------------------------------------------------

def test_sitewide_summary(site):
    site(_pages())
    result = runner.invoke(app, ["sitewide", "--url", BASE])
    assert result.exit_code == 0
    assert "Pages analysed : 4" in result.stdout
    assert "Successful     : 3" in result.stdout
    assert "Meta description ontbreekt  ×3" in result.stdout
    assert f"ERR  {BASE}c  (" in result.stdout
    assert "\u2014" not in result.stdout
    assert "100.0%  Sitewide analysis complete" in result.stdout


def test_sitewide_json_respects_max_pages(site):
    site(_pages())
    result = runner.invoke(app, ["sitewide", "--url", BASE, "--max-pages", "2", "--json"])
    assert result.exit_code == 0
    assert '"total_pages": 2' in result.stdout


def test_discover_prints_urls(site):
    site(_pages())
    result = runner.invoke(app, ["discover", "--url", BASE])
    assert result.exit_code == 0
    lines = [line for line in result.stdout.splitlines() if line.startswith("https://")]
    assert lines == [BASE, f"{BASE}a", f"{BASE}b", f"{BASE}c"]


# ---------------------------------------------------------------------------
# crawl
# ---------------------------------------------------------------------------

def test_crawl_listing(site):
    site(_pages())
    result = runner.invoke(app, ["crawl", "--url", BASE])
    assert result.exit_code == 0
    assert "4 URLs  (4 internal, 0 external, 1 images)" in result.stdout


def test_crawl_csv_to_stdout(site):
    site(_pages())
    result = runner.invoke(app, ["crawl", "--url", BASE, "--export", "csv", "--no-images"])
    assert result.exit_code == 0
    assert '"URL","Type","Internal","Found On","Text"' in result.stdout
    assert "hero.jpg" not in result.stdout


def test_crawl_txt_to_file(site, tmp_path):
    site(_pages())
    out = tmp_path / "urls.txt"
    result = runner.invoke(app, ["crawl", "--url", BASE, "--export", "txt", "-o", str(out)])
    assert result.exit_code == 0
    assert "written to" in result.stdout
    assert out.read_text(encoding="utf-8").splitlines()[0] == f"{BASE}a"


def test_crawl_unknown_format(site):
    site({})
    result = runner.invoke(app, ["crawl", "--url", BASE, "--export", "xml"])
    assert result.exit_code == 1
    assert "Unknown export format" in result.stdout

