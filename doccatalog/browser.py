"""
Headless browser session (Playwright, Chromium).

Wraps exactly one page that is reused for every navigation: the listing
first, then each detail page in turn. Use it as a context manager:

    with BrowserSession(config) as session:
        session.open_listing(config.listing_url)
        result = session.discover(config)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from doccatalog.config import ScrapeConfig
from doccatalog.discover import discover_course_links, settle
from doccatalog.errors import ExtractionError, NavigationError
from doccatalog.model import CellMatrix, DetailPage, DiscoveryResult
from doccatalog.normalize import TABLE_MATRIX_JS, clean_cell, rectangularize


class BrowserSession:
    def __init__(self, config: ScrapeConfig) -> None:
        self.config = config
        self._playwright: Any = None
        self._browser: Any = None
        self.page: Any = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> "BrowserSession":
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(headless=self.config.headless)
            context = self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            )
            self.page = context.new_page()
        except Exception:
            # __exit__ does not run when __enter__ raises
            self.__exit__(None, None, None)
            raise
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._browser is not None:
            self._browser.close()
        if self._playwright is not None:
            self._playwright.stop()
        self._browser = None
        self._playwright = None
        self.page = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _goto(self, url: str, delay: float) -> None:
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=self.config.navigation_timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError(url, str(exc)) from exc
        settle(self.page, self.config.network_idle_timeout_ms, delay)

    def open_listing(self, url: str) -> None:
        self._goto(url, self.config.list_settle_delay)

    def discover(self, config: ScrapeConfig) -> DiscoveryResult:
        return discover_course_links(self.page, config)

    def screenshot(self, path: Path) -> None:
        self.page.screenshot(path=str(path), full_page=True)

    # ------------------------------------------------------------------
    # Detail pages
    # ------------------------------------------------------------------

    def _title(self) -> Optional[str]:
        heading = self.page.locator("h1, h2").first
        try:
            if heading.count() == 0:
                return None
            return clean_cell(heading.text_content()) or None
        except PlaywrightError:
            return None

    def _matrix(self) -> Optional[CellMatrix]:
        table = self.page.locator("table").first
        try:
            if table.count() == 0:
                return None
            matrix = table.evaluate(TABLE_MATRIX_JS)
        except PlaywrightError as exc:
            raise ExtractionError(f"Could not read table on {self.page.url}: {exc}") from exc
        return rectangularize(matrix)

    def fetch_detail(self, url: str) -> DetailPage:
        # detail pages are server-rendered; only a short settle is needed
        self._goto(url, 0)
        try:
            html = self.page.content()
        except PlaywrightError as exc:
            raise ExtractionError(f"Could not read content of {url}: {exc}") from exc
        return DetailPage(url=url, html=html, title=self._title(), matrix=self._matrix())
