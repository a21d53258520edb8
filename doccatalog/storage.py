"""
Persistent storage for scraped data.

This module manages the files below the output directory:

    data/courses.json        list of CourseItem dicts (the run's result)
    data/raw/<slug>.html     raw detail pages
    data/raw/index.json      manifest: <slug>.html -> source URL

Design rationale:
- courses.json is always written, even when discovery found nothing,
  so downstream tooling never has to special-case a missing file
- raw pages are kept so tables can be re-normalized without a browser
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Dict, Iterable, List

from doccatalog.model import CourseItem


RAW_INDEX_NAME = "index.json"

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]+")


def slugify_url(url: str, max_len: int = 180) -> str:
    """
    Turn a URL into a file-system safe name.

    Non-alphanumeric runs become "_", leading/trailing "_" are removed and
    only the last max_len characters are kept (the tail carries the
    course/section id, the head is always the same host).
    """
    slug = _NON_ALNUM_RE.sub("_", url).strip("_")
    return slug[-max_len:] if slug else "page"


def save_courses(items: Iterable[CourseItem], path: str | Path) -> Path:
    """
    Save all course items as a JSON list. Creates parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    payload = [item.to_dict() for item in items]
    out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return out


def load_courses(path: str | Path) -> List[CourseItem]:
    """
    Load course items from courses.json.

    Returns an empty list if the file does not exist or is invalid.
    """
    src = Path(path)
    if not src.exists():
        return []
    try:
        data = json.loads(src.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return []
    if not isinstance(data, list):
        return []
    return [CourseItem.from_dict(x) for x in data if isinstance(x, dict) and x.get("url")]


def load_raw_index(raw_dir: str | Path) -> Dict[str, str]:
    """
    Load the file name -> URL manifest of a raw directory ({} if missing/broken).
    """
    index_path = Path(raw_dir) / RAW_INDEX_NAME
    if not index_path.exists():
        return {}
    try:
        data = json.loads(index_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}


def save_raw_html(raw_dir: str | Path, url: str, html: str) -> Path:
    """
    Write one raw detail page and record its source URL in the manifest.
    """
    raw_path = Path(raw_dir)
    raw_path.mkdir(parents=True, exist_ok=True)

    out_file = raw_path / f"{slugify_url(url)}.html"
    out_file.write_text(html, encoding="utf-8")

    index = load_raw_index(raw_path)
    index[out_file.name] = url
    (raw_path / RAW_INDEX_NAME).write_text(
        json.dumps(index, indent=2, ensure_ascii=False, sort_keys=True), encoding="utf-8"
    )
    return out_file
