"""
Static HTTP session (requests + BeautifulSoup).

For directories that also serve the listing as a static page
(<base>/sel/COMS_Fall2025.html) no browser is needed: the listing and
the detail pages are fetched with requests and parsed with bs4.
Screenshots are not available in this mode.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests

from doccatalog.config import ScrapeConfig
from doccatalog.discover import extract_links_from_html
from doccatalog.errors import NavigationError
from doccatalog.model import DetailPage, DiscoveryResult
from doccatalog.parse import parse_detail_html


class StaticSession:
    def __init__(self, config: ScrapeConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.http = session or requests.Session()
        self.http.headers["User-Agent"] = config.user_agent
        self._listing_url = ""
        self._listing_html = ""

    def __enter__(self) -> "StaticSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.http.close()

    def _get(self, url: str) -> requests.Response:
        try:
            resp = self.http.get(url, timeout=self.config.navigation_timeout_ms / 1000)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise NavigationError(url, str(exc)) from exc
        return resp

    def open_listing(self, url: str) -> None:
        resp = self._get(url)
        self._listing_url = resp.url or url
        self._listing_html = resp.text

    def discover(self, config: ScrapeConfig) -> DiscoveryResult:
        # hash routes never reach the server, so only the fetched document counts
        links = extract_links_from_html(self._listing_html, self._listing_url, config.subject, config.term_code)
        return DiscoveryResult(links=sorted(links), frame_urls=[self._listing_url] if self._listing_url else [])

    def screenshot(self, path: Path) -> None:
        return None

    def fetch_detail(self, url: str) -> DetailPage:
        return parse_detail_html(self._get(url).text, url)
