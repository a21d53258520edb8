"""
Unit tests for course link discovery.

The browser is replaced by small fakes: a FakeContext answers the link
probe with a fixed {location, hrefs} payload (or raises), a FakePage
additionally tracks the hash route and attaches frames after the route
has been forced.
"""

from __future__ import annotations

import unittest

from playwright.sync_api import Error as PlaywrightError

from doccatalog.config import ScrapeConfig
from doccatalog.discover import (
    HASH_ROUTE_JS,
    LINK_PROBE_JS,
    discover_course_links,
    extract_links_from_html,
    filter_course_links,
    probe_context,
)

BASE = "https://doc.sis.columbia.edu"
LISTING = f"{BASE}/sel/COMS_Fall2025.html"


def _cfg() -> ScrapeConfig:
    return ScrapeConfig(settle_delay=0, list_settle_delay=0, polite_delay=0)


class FakeContext:
    def __init__(self, url: str, hrefs=None, error: Exception | None = None, location: str | None = None) -> None:
        self.url = url
        self.hrefs = list(hrefs or [])
        self.error = error
        self.location = location or url
        self.probes = 0

    def evaluate(self, expression, arg=None):
        if expression == LINK_PROBE_JS:
            self.probes += 1
            if self.error is not None:
                raise self.error
            return {"location": self.location, "hrefs": list(self.hrefs)}
        raise AssertionError(f"unexpected script: {expression!r}")


class FakePage(FakeContext):
    """
    Top-level page. `late_frames` only show up in .frames once the hash
    route has been assigned, like an SPA rendering its listing frame.
    """

    def __init__(self, url: str, hrefs=None, late_frames=None, hash_fragment: str = "") -> None:
        super().__init__(url, hrefs)
        self.hash = hash_fragment
        self.late_frames = list(late_frames or [])
        self.routed = False
        self.idle_waits = 0

    @property
    def frames(self):
        frames = [self]
        if self.routed:
            frames.extend(self.late_frames)
        return frames

    def wait_for_load_state(self, state: str = "load", timeout=None) -> None:
        self.idle_waits += 1
        if self.idle_waits == 1:
            raise PlaywrightError("Timeout 15000ms exceeded.")

    def evaluate(self, expression, arg=None):
        if expression == HASH_ROUTE_JS:
            resource, route = arg
            if not self.hash or resource not in self.hash:
                self.hash = route
                self.routed = True
            return None
        return super().evaluate(expression, arg)


class TestFilterCourseLinks(unittest.TestCase):
    def test_resolves_relative_links_and_strips_fragment(self) -> None:
        links = filter_course_links(
            ["/subj/COMS/W4701-20253-001/#sections", f"{BASE}/subj/COMS/W4701-20253-001/"],
            LISTING,
            "COMS",
            "20253",
        )
        self.assertEqual(links, {f"{BASE}/subj/COMS/W4701-20253-001/"})

    def test_other_term_is_excluded(self) -> None:
        links = filter_course_links(
            ["/subj/COMS/W4701-20251-001/", "/subj/COMS/W4701-20253-001/"],
            LISTING,
            "COMS",
            "20253",
        )
        self.assertEqual(links, {f"{BASE}/subj/COMS/W4701-20253-001/"})

    def test_term_code_must_be_delimited(self) -> None:
        # 202531 contains 20253 but is not the delimited segment -20253-
        links = filter_course_links(["/subj/COMS/W4701-202531-001/"], LISTING, "COMS", "20253")
        self.assertEqual(links, set())

    def test_other_subject_is_excluded(self) -> None:
        links = filter_course_links(["/subj/MATH/V1101-20253-001/"], LISTING, "COMS", "20253")
        self.assertEqual(links, set())

    def test_unparseable_href_is_dropped(self) -> None:
        links = filter_course_links(
            ["http://[broken/subj/COMS/W4701-20253-001/", "/subj/COMS/W3134-20253-001/"],
            LISTING,
            "COMS",
            "20253",
        )
        self.assertEqual(links, {f"{BASE}/subj/COMS/W3134-20253-001/"})

    def test_markers_only_in_query_or_fragment_do_not_count(self) -> None:
        links = filter_course_links(
            ["/search?q=/subj/COMS/W4701-20253-001/", "#/subj/COMS/W4701-20253-001/"],
            LISTING,
            "COMS",
            "20253",
        )
        self.assertEqual(links, set())

    def test_static_html_variant(self) -> None:
        html = """
        <a href="/subj/COMS/W4701-20253-001/">AI</a>
        <a href="/subj/COMS/W4701-20253-001/#top">AI again</a>
        <a href="/subj/COMS/W4701-20251-001/">old term</a>
        <a>no href</a>
        """
        self.assertEqual(
            extract_links_from_html(html, LISTING, "COMS", "20253"),
            {f"{BASE}/subj/COMS/W4701-20253-001/"},
        )


class TestProbeContext(unittest.TestCase):
    def test_failed_evaluation_contributes_nothing(self) -> None:
        ctx = FakeContext(LISTING, error=PlaywrightError("Execution context was destroyed"))
        self.assertEqual(probe_context(ctx, "COMS", "20253"), set())
        self.assertEqual(ctx.probes, 1)

    def test_context_without_location_is_skipped(self) -> None:
        for url in ("", "about:blank"):
            ctx = FakeContext(url, hrefs=["/subj/COMS/W4701-20253-001/"])
            self.assertEqual(probe_context(ctx, "COMS", "20253"), set())
            self.assertEqual(ctx.probes, 0)

    def test_links_resolve_against_reported_location(self) -> None:
        ctx = FakeContext(
            LISTING,
            hrefs=["../subj/COMS/W4701-20253-001/"],
            location=f"{BASE}/frames/inner/list.html",
        )
        self.assertEqual(
            probe_context(ctx, "COMS", "20253"),
            {f"{BASE}/frames/subj/COMS/W4701-20253-001/"},
        )


class TestDiscoverCourseLinks(unittest.TestCase):
    def test_links_in_late_frame_are_found_after_hash_route(self) -> None:
        frame = FakeContext(LISTING, hrefs=["/subj/COMS/W4701-20253-001/", "/subj/COMS/W3134-20253-001/"])
        page = FakePage(f"{BASE}/", late_frames=[frame])

        result = discover_course_links(page, _cfg())

        self.assertEqual(page.hash, "#sel/COMS_Fall2025.html")
        self.assertEqual(
            result.links,
            [f"{BASE}/subj/COMS/W3134-20253-001/", f"{BASE}/subj/COMS/W4701-20253-001/"],
        )
        self.assertEqual(result.frame_urls, [f"{BASE}/", LISTING])
        self.assertEqual(page.idle_waits, 2)

    def test_hash_route_left_alone_when_already_set(self) -> None:
        page = FakePage(f"{BASE}/", hash_fragment="#sel/COMS_Fall2025.html")
        discover_course_links(page, _cfg())
        self.assertFalse(page.routed)
        self.assertEqual(page.hash, "#sel/COMS_Fall2025.html")

    def test_overlapping_contexts_are_deduplicated(self) -> None:
        a = FakeContext(LISTING, hrefs=["/subj/COMS/W4701-20253-001/#top"])
        b = FakeContext(LISTING, hrefs=["/subj/COMS/W4701-20253-001/"])
        page = FakePage(f"{BASE}/", hrefs=[f"{BASE}/subj/COMS/W4701-20253-001/"], late_frames=[a, b])

        result = discover_course_links(page, _cfg())

        self.assertEqual(result.links, [f"{BASE}/subj/COMS/W4701-20253-001/"])

    def test_failing_frame_does_not_abort_discovery(self) -> None:
        bad = FakeContext(f"{BASE}/ads.html", error=PlaywrightError("Frame was detached"))
        good = FakeContext(LISTING, hrefs=["/subj/COMS/W4701-20253-001/"])
        page = FakePage(f"{BASE}/", late_frames=[bad, good])

        result = discover_course_links(page, _cfg())

        self.assertEqual(result.links, [f"{BASE}/subj/COMS/W4701-20253-001/"])
        self.assertEqual(bad.probes, 1)

    def test_nothing_found_returns_empty_result(self) -> None:
        page = FakePage(f"{BASE}/")
        result = discover_course_links(page, _cfg())
        self.assertEqual(result.links, [])
        self.assertEqual(len(result), 0)


if __name__ == "__main__":
    unittest.main()
