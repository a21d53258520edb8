"""
Table normalization (cell matrix -> list of field records).

Detail pages carry their data in the first <table>. Two layouts occur:

- 2 columns: label/value panel. The VALUE is in the left cell and the
  LABEL in the right cell, e.g. ["TR 10:10-11:25", "Times"].
  The first row is usually ["<call number>", "Call Number"].
- 3+ columns: ordinary header table (row 0 = column names),
  e.g. multiple meeting times.

The layout is picked once per table from the column count; each layout
is an independent pure function over a rectangular matrix.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set

from bs4.element import Tag

from doccatalog.model import CellMatrix, FieldRecord


log = logging.getLogger(__name__)

CALL_NUMBER = "Call Number"

_WS_RE = re.compile(r"\s+")


# Runs inside the page (Locator.evaluate) with the <table> element as argument.
TABLE_MATRIX_JS = """
(t) => Array.from(t.querySelectorAll('tr')).map((r) =>
  Array.from(r.querySelectorAll('th,td')).map((el) =>
    (el.textContent || '').trim().replace(/\\s+/g, ' ')
  )
)
"""


class Layout(Enum):
    LABEL_VALUE = "label_value"
    HEADER = "header"
    NONE = "none"


# ---------------------------------------------------------------------------
# Matrix construction
# ---------------------------------------------------------------------------


def clean_cell(text: Optional[str]) -> str:
    """
    Trim and collapse internal whitespace (newlines, tabs, nbsp) to one space.
    """
    if not text:
        return ""
    return _WS_RE.sub(" ", text.replace("\xa0", " ")).strip()


def extract_cell_matrix(table: Tag) -> CellMatrix:
    """
    Build the cell matrix of one <table> element (th and td cells per tr).

    Same result as TABLE_MATRIX_JS, for HTML that is already on disk or
    came from a plain HTTP request.
    """
    matrix: CellMatrix = []
    for tr in table.find_all("tr"):
        matrix.append([clean_cell(cell.get_text(" ")) for cell in tr.find_all(["th", "td"])])
    return matrix


def rectangularize(matrix: Sequence[Sequence[str]]) -> CellMatrix:
    """
    Pad short rows with "" up to the widest row. Returns a new matrix.
    """
    width = max((len(r) for r in matrix), default=0)
    return [list(r) + [""] * (width - len(r)) for r in matrix]


# ---------------------------------------------------------------------------
# Layout strategies
# ---------------------------------------------------------------------------


def select_layout(matrix: CellMatrix) -> Layout:
    """
    Pick the layout of a rectangular matrix by its column count.

    Single-column tables and wide tables without data rows have no
    extraction rule and map to Layout.NONE.
    """
    if not matrix:
        return Layout.NONE
    cols = len(matrix[0])
    if cols == 2:
        return Layout.LABEL_VALUE
    if cols >= 3 and len(matrix) >= 2:
        return Layout.HEADER
    return Layout.NONE


def label_value_records(matrix: CellMatrix) -> List[FieldRecord]:
    """
    Label/value panel: every row is [value, label].

    Row 0 is only used to recover the call number, whose label cell
    reads "Call Number" (sometimes with extra text). All other rows give
    {label: value} as long as both cells are non-empty.
    """
    records: List[FieldRecord] = []
    if not matrix:
        return records

    top_value, top_label = matrix[0][0], matrix[0][1]
    if CALL_NUMBER.lower() in top_label.lower() and top_value:
        records.append({CALL_NUMBER: top_value})

    for value, label in (row[:2] for row in matrix[1:]):
        if label and value:
            records.append({label: value})

    return records


def _header_names(header_row: Sequence[str]) -> List[str]:
    names: List[str] = []
    used: Set[str] = set()
    for idx, raw in enumerate(header_row):
        base = raw or f"col_{idx + 1}"
        name, n = base, 1
        # suffix until free, generated names may clash with real headers
        while name in used:
            n += 1
            name = f"{base}_{n}"
        used.add(name)
        names.append(name)
    return names


def header_records(matrix: CellMatrix) -> List[FieldRecord]:
    """
    Header table: row 0 names the columns, every further row is one record.

    Empty header cells become col_N (1-indexed); a repeated header gets a
    numeric suffix so keys stay unique within a record.
    """
    if len(matrix) < 2:
        return []

    names = _header_names(matrix[0])
    records: List[FieldRecord] = []
    for row in matrix[1:]:
        records.append({name: (row[idx] if idx < len(row) else "") for idx, name in enumerate(names)})
    return records


_LAYOUT_HANDLERS: Dict[Layout, Callable[[CellMatrix], List[FieldRecord]]] = {
    Layout.LABEL_VALUE: label_value_records,
    Layout.HEADER: header_records,
    Layout.NONE: lambda matrix: [],
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_table(matrix: Sequence[Sequence[str]]) -> List[FieldRecord]:
    """
    Convert one table's cell matrix into field records.

    Ragged input is padded first. An empty matrix, a matrix without
    columns or a table without an extraction rule yields [].
    """
    rect = rectangularize(matrix)
    layout = select_layout(rect)
    log.debug("table %dx%d -> %s", len(rect), len(rect[0]) if rect else 0, layout.value)
    return _LAYOUT_HANDLERS[layout](rect)
