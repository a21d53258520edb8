"""
Exception types.

Everything raised on purpose by doccatalog derives from ScrapeError,
so the CLI can report it as one line instead of a traceback.
"""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for all doccatalog errors."""


class ConfigError(ScrapeError):
    """Invalid ScrapeConfig value (bad policy, empty subject, negative delay, ...)."""


class NavigationError(ScrapeError):
    """A page could not be loaded (timeout, HTTP error, browser error)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not load {url}: {reason}")
        self.url = url
        self.reason = reason


class ExtractionError(ScrapeError):
    """A loaded page could not be turned into a title / cell matrix."""
