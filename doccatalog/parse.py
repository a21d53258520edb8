"""
Parsing (cached HTML -> structured JSON).

- Reads raw detail pages saved by a scraping run (data/raw/*.html)
- Re-runs title + table normalization without a browser
- Writes the same courses.json layout as a live run

Useful after changing normalization rules: no need to hit the site again.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from bs4 import BeautifulSoup

from doccatalog.model import CourseItem, DetailPage
from doccatalog.normalize import clean_cell, extract_cell_matrix
from doccatalog.scrape import build_course_item
from doccatalog.storage import load_raw_index


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_detail_html(html: str, url: str) -> DetailPage:
    """
    Build a DetailPage from saved HTML: title from the first h1/h2,
    matrix from the first table (None if there is no table).
    """
    soup = BeautifulSoup(html, "html.parser")

    heading = soup.select_one("h1, h2")
    title = clean_cell(heading.get_text(" ")) if heading else ""

    table = soup.find("table")
    matrix = extract_cell_matrix(table) if table is not None else None

    return DetailPage(url=url, html=html, title=title or None, matrix=matrix)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_raw_dir(raw_dir: str | Path) -> List[CourseItem]:
    """
    Parse all cached HTML files of a raw directory into course items.

    The source URL of each file comes from the directory's index.json;
    files that are not listed there fall back to their file stem.
    """
    raw_path = Path(raw_dir)
    index = load_raw_index(raw_path)

    items: List[CourseItem] = []
    for html_file in sorted(raw_path.glob("*.html")):
        url = index.get(html_file.name, html_file.stem)
        html = html_file.read_text(encoding="utf-8")
        items.append(build_course_item(parse_detail_html(html, url)))

    return items
