"""
Tests for re-normalizing cached raw pages.
"""

import tempfile
import unittest
from pathlib import Path

from doccatalog.parse import parse_detail_html, parse_raw_dir
from doccatalog.storage import save_raw_html

HEADER_PAGE = """
<html><body>
  <h1>Data Structures</h1>
  <table>
    <tr><th>Day</th><th>Time</th><th>Room</th></tr>
    <tr><td>MW</td><td>13:10-14:25</td><td>501 NWC</td></tr>
  </table>
  <table><tr><td>second table is ignored</td><td>x</td></tr></table>
</body></html>
"""


class TestParse(unittest.TestCase):
    def test_page_without_table_has_no_matrix(self) -> None:
        page = parse_detail_html("<html><body><p>Not found</p></body></html>", "https://x/")
        self.assertIsNone(page.title)
        self.assertIsNone(page.matrix)

    def test_only_first_table_is_used(self) -> None:
        page = parse_detail_html(HEADER_PAGE, "https://x/")
        self.assertEqual(page.title, "Data Structures")
        self.assertEqual(page.matrix, [["Day", "Time", "Room"], ["MW", "13:10-14:25", "501 NWC"]])

    def test_parse_raw_dir_uses_manifest_urls(self) -> None:
        url = "https://doc.sis.columbia.edu/subj/COMS/W3134-20253-001/"
        with tempfile.TemporaryDirectory() as d:
            save_raw_html(d, url, HEADER_PAGE)
            (Path(d) / "unlisted.html").write_text("<html></html>", encoding="utf-8")

            items = parse_raw_dir(d)

        by_url = {it.url: it for it in items}
        self.assertEqual(set(by_url), {url, "unlisted"})
        self.assertEqual(by_url[url].rows, [{"Day": "MW", "Time": "13:10-14:25", "Room": "501 NWC"}])
        self.assertIsNone(by_url["unlisted"].rows)


if __name__ == "__main__":
    unittest.main()
