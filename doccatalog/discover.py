"""
Course link discovery.

The directory is a single-page app: the subject listing is rendered by a
client-side route (#sel/COMS_Fall2025.html) and often ends up inside a
frame instead of the top document. Discovery therefore:

1. probes the top document right away
2. waits for the network to settle, forces the hash route if needed,
   and waits again
3. re-reads page.frames (frames attach late) and probes every frame
4. returns the union, fragment-free and deduplicated

The DOM query only returns raw href attributes plus the context's own
location; filtering and URL resolution happen in filter_course_links(),
which is plain Python and shared with the static HTML variant.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, List, Set
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

from doccatalog.config import ScrapeConfig
from doccatalog.model import DiscoveryResult


log = logging.getLogger(__name__)


LINK_PROBE_JS = """
() => ({
  location: location.href,
  hrefs: Array.from(document.querySelectorAll('a[href]')).map((a) => a.getAttribute('href') || ''),
})
"""

# Assigning location.hash makes the SPA render the listing route.
HASH_ROUTE_JS = """
([resource, route]) => {
  if (!location.hash || !location.hash.includes(resource)) {
    location.hash = route;
  }
}
"""


# ---------------------------------------------------------------------------
# Link predicate
# ---------------------------------------------------------------------------


def _markers(subject: str, term_code: str) -> tuple[str, str]:
    return f"/subj/{subject}/", f"-{term_code}-"


def _is_web_location(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def filter_course_links(hrefs: Iterable[str], location: str, subject: str, term_code: str) -> Set[str]:
    """
    Keep the hrefs that point at a course detail page of the given term.

    A detail URL looks like /subj/COMS/W4701-20253-001/ : it contains the
    subject path and the term code delimited by dashes. Matching hrefs are
    resolved against the context's location and lose their #fragment.
    Hrefs that cannot be parsed are dropped.
    """
    subject_marker, term_marker = _markers(subject, term_code)
    links: Set[str] = set()

    for href in hrefs:
        if not isinstance(href, str):
            continue
        href = href.strip()
        if subject_marker not in href or term_marker not in href:
            continue
        try:
            absolute, _fragment = urldefrag(urljoin(location, href))
        except ValueError:
            # e.g. "http://[broken" -> invalid IPv6 literal
            continue
        if not _is_web_location(absolute):
            continue
        path = urlparse(absolute).path
        if subject_marker not in path or term_marker not in path:
            continue
        links.add(absolute)

    return links


def extract_links_from_html(html: str, base_url: str, subject: str, term_code: str) -> Set[str]:
    """
    Static variant of the probe: parse HTML and filter its <a href> values.

    Used when the listing is served as a plain document (fallback URL).
    """
    soup = BeautifulSoup(html, "html.parser")
    hrefs = [a.get("href") or "" for a in soup.select("a[href]")]
    return filter_course_links(hrefs, base_url, subject, term_code)


# ---------------------------------------------------------------------------
# Browsing contexts
# ---------------------------------------------------------------------------


def probe_context(context: Any, subject: str, term_code: str) -> Set[str]:
    """
    Run the link probe inside one browsing context (Page or Frame).

    A context that is still navigating (no usable URL yet) or whose
    evaluation fails contributes an empty set.
    """
    location = getattr(context, "url", "") or ""
    if not _is_web_location(location):
        log.debug("skip context without web location: %r", location)
        return set()

    try:
        payload = context.evaluate(LINK_PROBE_JS)
    except PlaywrightError as exc:
        log.debug("probe failed in %s: %s", location, exc)
        return set()

    if not isinstance(payload, dict):
        return set()
    # the context reports its own location; prefer it over the cached frame.url
    resolved = payload.get("location") or location
    hrefs = payload.get("hrefs") or []
    return filter_course_links(hrefs, resolved, subject, term_code)


def settle(page: Any, timeout_ms: int, delay: float) -> None:
    """
    Best-effort wait for network quiet, then a fixed delay.

    Timeouts are expected on SPA pages with long-polling and are ignored.
    """
    try:
        page.wait_for_load_state("networkidle", timeout=timeout_ms)
    except PlaywrightError as exc:
        log.debug("networkidle wait ended early: %s", exc)
    if delay > 0:
        time.sleep(delay)


def ensure_listing_route(page: Any, resource: str, route: str) -> None:
    """
    Point location.hash at the listing route unless it already mentions it.
    """
    try:
        page.evaluate(HASH_ROUTE_JS, [resource, route])
    except PlaywrightError as exc:
        log.debug("could not set listing route %s: %s", route, exc)


def discover_course_links(page: Any, config: ScrapeConfig) -> DiscoveryResult:
    """
    Find all course detail URLs of config.term_code on the loaded page.

    page is a Playwright Page (or anything with url / evaluate /
    wait_for_load_state / frames). Returns links sorted for stable output.
    """
    found: Set[str] = set()

    # Pass 1: top document as loaded
    found |= probe_context(page, config.subject, config.term_code)

    # Let the SPA attach its frames, then nudge the hash route
    settle(page, config.network_idle_timeout_ms, config.settle_delay)
    ensure_listing_route(page, config.listing_resource, config.listing_route)
    settle(page, config.network_idle_timeout_ms, config.settle_delay)

    # Pass 2: every frame attached by now (main frame included)
    frame_urls: List[str] = []
    for frame in list(page.frames):
        frame_urls.append(getattr(frame, "url", "") or "")
        found |= probe_context(frame, config.subject, config.term_code)

    return DiscoveryResult(links=sorted(found), frame_urls=frame_urls)
