"""
Central data model definitions used across the project.

This module defines the canonical shapes that flow between discovery,
table normalization and the JSON output so that:
- all modules share the same field names
- courses.json keeps the same layout no matter which session produced it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# One row of trimmed, whitespace-collapsed cell texts per <tr>
CellMatrix = List[List[str]]

# field name -> value, keys unique and non-empty
FieldRecord = Dict[str, str]


@dataclass(frozen=True)
class CourseItem:
    """
    Represents one course as stored in courses.json.

    rows is None when the detail page had no table at all, which is
    different from an empty list (table found, nothing extractable).
    error is only set when the course was skipped after a failure.
    """

    url: str
    title: Optional[str] = None
    rows: Optional[List[FieldRecord]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"url": self.url, "title": self.title}
        if self.rows is not None:
            out["rows"] = [dict(r) for r in self.rows]
        if self.error is not None:
            out["error"] = self.error
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CourseItem":
        rows = data.get("rows")
        return cls(
            url=str(data.get("url", "")),
            title=data.get("title"),
            rows=[dict(r) for r in rows if isinstance(r, dict)] if isinstance(rows, list) else None,
            error=data.get("error"),
        )


@dataclass
class DetailPage:
    """
    Everything one detail-page visit yields before normalization.
    """

    url: str
    html: str
    title: Optional[str]
    matrix: Optional[CellMatrix]


@dataclass
class DiscoveryResult:
    """
    Outcome of one discovery pass.

    frame_urls lists the location of every browsing context that was
    inspected; it is only used for progress output.
    """

    links: List[str] = field(default_factory=list)
    frame_urls: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.links)
