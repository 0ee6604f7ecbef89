"""URL inventory: every link and image found while crawling a site.

Unlike :func:`backend.crawler.frontier.discover`, which only cares about
which internal pages exist, the inventory records each URL seen on the
crawled pages (internal and external, links and images) together with the
pages it was found on, and can export the result as CSV or plain text.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Set, Tuple

from bs4 import BeautifulSoup

from backend.crawler.frontier import Fetch, is_internal_url
from backend.errors import SeoMaxError
from backend.scraper.urls import ensure_valid_url, resolve_url

SKIPPED_HREF_PREFIXES = ("#", "mailto:", "tel:", "javascript:")

RecordKind = Literal["link", "image"]

CSV_COLUMNS = ["URL", "Type", "Internal", "Found On", "Text"]


@dataclass
class UrlRecord:
    url: str
    kind: RecordKind
    internal: bool
    found_on: str
    text: str = ""
    alt: str = ""
    found_on_pages: List[str] = field(default_factory=list)


class _Inventory:
    def __init__(self) -> None:
        self.records: List[UrlRecord] = []
        self._index: Dict[Tuple[str, str], UrlRecord] = {}

    def add(self, record: UrlRecord) -> None:
        key = (record.url, record.kind)
        existing = self._index.get(key)
        if existing is None:
            record.found_on_pages = [record.found_on]
            self._index[key] = record
            self.records.append(record)
            return
        if record.text and not existing.text:
            existing.text = record.text
        if record.alt and not existing.alt:
            existing.alt = record.alt
        if record.found_on not in existing.found_on_pages:
            existing.found_on_pages.append(record.found_on)


async def build_inventory(
    base_url: str,
    *,
    fetch: Fetch,
    depth: int = 1,
    find_images: bool = True,
    max_pages: int = 50,
) -> List[UrlRecord]:
    """Crawl *base_url* to *depth* levels and inventory every URL seen.

    Depth 1 inspects only the base page; each extra level follows the
    internal links found on the previous one.  At most *max_pages* pages are
    fetched.  Pages that fail to load are logged and skipped.
    """
    base_url = ensure_valid_url(base_url)
    inventory = _Inventory()
    crawled: Set[str] = set()
    level: List[str] = [base_url]

    for current_depth in range(1, max(depth, 1) + 1):
        next_level: List[str] = []
        for page_url in level:
            if page_url in crawled or len(crawled) >= max_pages:
                continue
            crawled.add(page_url)
            try:
                page = await fetch(page_url)
            except SeoMaxError as exc:
                print(f"[inventory] ✗ Failed {page_url!r}: {exc}")
                continue

            soup = BeautifulSoup(page.body_text or "", "html.parser")
            for anchor in soup.find_all("a", href=True):
                href = (anchor.get("href") or "").strip()
                if not href or href.startswith(SKIPPED_HREF_PREFIXES):
                    continue
                absolute = resolve_url(href, page_url)
                if absolute is None:
                    continue
                internal = is_internal_url(absolute, base_url)
                inventory.add(
                    UrlRecord(
                        url=absolute,
                        kind="link",
                        internal=internal,
                        found_on=page_url,
                        text=anchor.get_text().strip(),
                    )
                )
                if internal and current_depth < depth:
                    next_level.append(absolute)

            if find_images:
                for img in soup.find_all("img", src=True):
                    src = (img.get("src") or "").strip()
                    absolute = resolve_url(src, page_url) if src else None
                    if absolute is None:
                        continue
                    inventory.add(
                        UrlRecord(
                            url=absolute,
                            kind="image",
                            internal=is_internal_url(absolute, base_url),
                            found_on=page_url,
                            alt=img.get("alt") or "",
                        )
                    )
        level = next_level

    print(f"[inventory] {len(inventory.records)} URL(s) from {len(crawled)} page(s)")
    return inventory.records


# ---------------------------------------------------------------------------
# Summaries & export
# ---------------------------------------------------------------------------

def inventory_stats(records: List[UrlRecord]) -> dict[str, int]:
    internal = sum(1 for r in records if r.internal)
    return {
        "total": len(records),
        "internal": internal,
        "external": len(records) - internal,
        "images": sum(1 for r in records if r.kind == "image"),
    }


def export_csv(records: List[UrlRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_ALL)
    writer.writeheader()
    for r in records:
        writer.writerow(
            {
                "URL": r.url,
                "Type": r.kind,
                "Internal": "Yes" if r.internal else "No",
                "Found On": r.found_on,
                "Text": r.text or r.alt,
            }
        )
    return buffer.getvalue()


def export_txt(records: List[UrlRecord]) -> str:
    return "\n".join(r.url for r in records)
