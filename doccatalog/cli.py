"""
CLI (Command Line Interface).

This module provides the terminal commands, e.g.:

    doccatalog scrape --subject COMS --term Fall2025 --term-code 20253
    doccatalog scrape --static --on-error skip --limit 10
    doccatalog parse data/raw --out data/courses.json
    doccatalog show data/courses.json

Note:
- scrape drives a headless Chromium by default (--static uses plain HTTP)
- all commands exit via SystemExit with a return code
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from rich.logging import RichHandler
from rich.table import Table

from doccatalog.config import (
    DEFAULT_BASE_URL,
    DEFAULT_SUBJECT,
    DEFAULT_TERM,
    DEFAULT_TERM_CODE,
    ERROR_POLICIES,
    ScrapeConfig,
)
from doccatalog.errors import ScrapeError
from doccatalog.parse import parse_raw_dir
from doccatalog.scrape import console, scrape_term
from doccatalog.storage import load_courses, save_courses


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _config_from_args(args: argparse.Namespace) -> ScrapeConfig:
    return ScrapeConfig(
        base_url=args.base_url,
        subject=args.subject.strip(),
        term=args.term.strip(),
        term_code=args.term_code.strip(),
        out_dir=Path(args.out_dir),
        settle_delay=args.settle,
        polite_delay=args.sleep,
        on_error=args.on_error,
        headless=not args.headed,
        screenshots=not args.no_screenshots and not args.static,
        save_raw=not args.no_raw,
        limit=args.limit,
    )


def _cmd_scrape(args: argparse.Namespace) -> int:
    """
    Run discovery + detail scraping and write courses.json.
    """
    config = _config_from_args(args).validate()

    if args.static:
        from doccatalog.static import StaticSession

        session_cm: Any = StaticSession(config)
    else:
        from doccatalog.browser import BrowserSession

        session_cm = BrowserSession(config)

    with session_cm as session:
        items = scrape_term(config, session)

    failed = sum(1 for it in items if it.error)
    if failed:
        console.print(f"{failed} of {len(items)} courses failed (see 'error' in output).")
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    """
    Re-normalize cached raw pages into a courses.json file.
    """
    raw_dir = Path(args.raw_dir)
    if not raw_dir.is_dir():
        console.print(f"Not a directory: {raw_dir}")
        return 1

    items = parse_raw_dir(raw_dir)
    out = save_courses(items, args.out)
    console.print(f"Parsed {len(items)} pages. JSON written to {out.resolve()}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Print a short overview table of a courses.json file.
    """
    items = load_courses(args.file)
    if not items:
        console.print("No courses.")
        return 0

    table = Table(title=f"{args.file} ({len(items)} courses)")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Fields", justify="right")
    table.add_column("URL", overflow="fold")

    for i, item in enumerate(items[: args.max], start=1):
        if item.error:
            fields = "error"
        elif item.rows is None:
            fields = "-"
        else:
            fields = str(len(item.rows))
        table.add_row(str(i), item.title or "(no title)", fields, item.url)

    console.print(table)
    if len(items) > args.max:
        console.print(f"... and {len(items) - args.max} more")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="doccatalog", description="Course directory scraper")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug log output")
    sub = parser.add_subparsers(dest="command", required=True)

    p_scrape = sub.add_parser("scrape", help="Scrape one term's course pages")
    p_scrape.add_argument("--base-url", type=str, default=DEFAULT_BASE_URL, help="Directory root URL")
    p_scrape.add_argument("--subject", type=str, default=DEFAULT_SUBJECT, help="Subject code (e.g. COMS)")
    p_scrape.add_argument("--term", type=str, default=DEFAULT_TERM, help="Term label in listing names (e.g. Fall2025)")
    p_scrape.add_argument("--term-code", type=str, default=DEFAULT_TERM_CODE, help="Term code in detail URLs (e.g. 20253)")
    p_scrape.add_argument("--out-dir", type=str, default="data", help="Output directory")
    p_scrape.add_argument("--settle", type=float, default=0.8, help="Seconds to wait after network idle")
    p_scrape.add_argument("--sleep", type=float, default=0.35, help="Sleep seconds between detail pages")
    p_scrape.add_argument("--on-error", choices=ERROR_POLICIES, default="abort", help="Per-course failure policy")
    p_scrape.add_argument("--limit", type=int, default=None, help="Only fetch the first N detail pages")
    p_scrape.add_argument("--static", action="store_true", help="Use plain HTTP instead of a browser")
    p_scrape.add_argument("--headed", action="store_true", help="Show the browser window")
    p_scrape.add_argument("--no-screenshots", action="store_true", help="Skip the listing screenshot")
    p_scrape.add_argument("--no-raw", action="store_true", help="Do not keep raw detail HTML")

    p_parse = sub.add_parser("parse", help="Parse cached raw HTML into courses.json")
    p_parse.add_argument("raw_dir", type=str, help="Directory with raw *.html pages")
    p_parse.add_argument("--out", type=str, default="data/courses.json", help="Output JSON path")

    p_show = sub.add_parser("show", help="Show a courses.json overview")
    p_show.add_argument("file", type=str, nargs="?", default="data/courses.json", help="courses.json path")
    p_show.add_argument("--max", type=int, default=20, help="Maximum rows to print")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    handlers = {
        "scrape": _cmd_scrape,
        "parse": _cmd_parse,
        "show": _cmd_show,
    }

    try:
        raise SystemExit(handlers[args.command](args))
    except ScrapeError as exc:
        console.print(f"Error: {exc}", style="red", markup=False)
        raise SystemExit(1)
