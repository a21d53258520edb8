"""
Scraping run (listing -> links -> detail pages -> courses.json).

A session is either a BrowserSession (Playwright) or a StaticSession
(requests); both provide:

    open_listing(url)        load the listing page
    discover(config)         -> DiscoveryResult for the loaded listing
    fetch_detail(url)        -> DetailPage
    screenshot(path)         full-page screenshot (no-op without a browser)

Pages are visited strictly one after another.
"""

from __future__ import annotations

import time
from typing import Any, List

from playwright.sync_api import Error as PlaywrightError
from rich.console import Console

from doccatalog.config import ScrapeConfig
from doccatalog.errors import ScrapeError
from doccatalog.model import CourseItem, DetailPage
from doccatalog.normalize import normalize_table
from doccatalog.storage import save_courses, save_raw_html


console = Console(highlight=False)

# failures of a single detail page that the "skip" policy may absorb
PER_COURSE_ERRORS = (ScrapeError, PlaywrightError, OSError)


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def _discover_links(session: Any, config: ScrapeConfig) -> List[str]:
    """
    Discover course links on the listing; fall back to the static listing
    URL if the first pass finds nothing.
    """
    result = session.discover(config)
    console.print(f"Frame count: {len(result.frame_urls)}")
    for i, u in enumerate(result.frame_urls[:5]):
        console.print(f"  [frame {i}] {u}", markup=False)
    console.print(f"Discovered {len(result)} course links.")

    links = list(result.links)
    if links:
        return links

    console.print(f"No links found from main/frames. Trying {config.fallback_url}", style="yellow", markup=False)
    try:
        session.open_listing(config.fallback_url)
        retry = session.discover(config)
    except ScrapeError as exc:
        console.print(f"Fallback navigation failed: {exc}", style="yellow", markup=False)
        return links

    console.print(f"Fallback discovered {len(retry)} course links.")
    return list(retry.links)


def build_course_item(page: DetailPage) -> CourseItem:
    """
    Turn one fetched detail page into its CourseItem.
    """
    rows = normalize_table(page.matrix) if page.matrix is not None else None
    return CourseItem(url=page.url, title=page.title, rows=rows)


def _scrape_course(session: Any, url: str, config: ScrapeConfig) -> CourseItem:
    page = session.fetch_detail(url)
    if config.save_raw:
        save_raw_html(config.raw_dir, url, page.html)
    return build_course_item(page)


def scrape_term(config: ScrapeConfig, session: Any) -> List[CourseItem]:
    """
    Scrape all course detail pages of one term and write courses.json.

    Per-course failures abort the run (on_error="abort") or are recorded
    as an item with "error" set (on_error="skip"). courses.json is written
    even if no link was found.
    """
    config.validate()
    if config.save_raw:
        config.raw_dir.mkdir(parents=True, exist_ok=True)
    if config.screenshots:
        config.screenshots_dir.mkdir(parents=True, exist_ok=True)

    console.print(f"Navigating to list: {config.listing_url}")
    session.open_listing(config.listing_url)
    if config.screenshots:
        session.screenshot(config.screenshots_dir / "list.png")

    links = _discover_links(session, config)
    if config.limit is not None:
        links = links[: config.limit]

    results: List[CourseItem] = []
    for i, url in enumerate(links, start=1):
        console.print(f"[{i}/{len(links)}] Fetching {url}", markup=False)
        try:
            item = _scrape_course(session, url, config)
        except PER_COURSE_ERRORS as exc:
            if config.on_error == "abort":
                raise
            console.print(f"FAILED {url}: {exc}", style="red", markup=False)
            item = CourseItem(url=url, error=str(exc))
        results.append(item)

        if config.polite_delay > 0:
            time.sleep(config.polite_delay)

    out_path = save_courses(results, config.output_path)
    console.print(f"Wrote {out_path} ({len(results)} courses)")
    return results
