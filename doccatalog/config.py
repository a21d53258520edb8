"""
Run configuration.

A ScrapeConfig is built once (normally from CLI flags) and passed
explicitly into the orchestrator and the sessions. The defaults target
the Columbia Directory of Classes, COMS, Fall 2025.

Term code vs. term label:
- term      "Fall2025"  -> used in the listing file name (COMS_Fall2025.html)
- term_code "20253"     -> appears in detail URLs (/subj/COMS/W4701-20253-001/)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from doccatalog.errors import ConfigError


DEFAULT_BASE_URL = "https://doc.sis.columbia.edu"
DEFAULT_SUBJECT = "COMS"
DEFAULT_TERM = "Fall2025"
DEFAULT_TERM_CODE = "20253"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

ERROR_POLICIES = ("abort", "skip")


@dataclass(frozen=True)
class ScrapeConfig:
    base_url: str = DEFAULT_BASE_URL
    subject: str = DEFAULT_SUBJECT
    term: str = DEFAULT_TERM
    term_code: str = DEFAULT_TERM_CODE
    out_dir: Path = Path("data")

    # seconds; "networkidle" is unreliable for the SPA, so every wait is
    # followed by a fixed delay
    settle_delay: float = 0.8
    list_settle_delay: float = 1.0
    polite_delay: float = 0.35

    network_idle_timeout_ms: int = 15000
    navigation_timeout_ms: int = 60000

    on_error: str = "abort"
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 900

    screenshots: bool = True
    save_raw: bool = True
    limit: Optional[int] = None

    # ------------------------------------------------------------------
    # Derived URLs
    # ------------------------------------------------------------------

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def listing_resource(self) -> str:
        return f"{self.subject}_{self.term}.html"

    @property
    def listing_route(self) -> str:
        return f"#sel/{self.listing_resource}"

    @property
    def listing_url(self) -> str:
        return f"{self.root_url}/{self.listing_route}"

    @property
    def fallback_url(self) -> str:
        return f"{self.root_url}/sel/{self.listing_resource}"

    # ------------------------------------------------------------------
    # Output locations
    # ------------------------------------------------------------------

    @property
    def raw_dir(self) -> Path:
        return Path(self.out_dir) / "raw"

    @property
    def screenshots_dir(self) -> Path:
        return Path(self.out_dir) / "screenshots"

    @property
    def output_path(self) -> Path:
        return Path(self.out_dir) / "courses.json"

    # ------------------------------------------------------------------

    def validate(self) -> "ScrapeConfig":
        """
        Raise ConfigError for values no run can work with; return self
        so calls can be chained.
        """
        if not self.subject.strip():
            raise ConfigError("subject must not be empty")
        if not self.term.strip():
            raise ConfigError("term must not be empty")
        if not self.term_code.strip():
            raise ConfigError("term_code must not be empty")
        if not self.root_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.on_error not in ERROR_POLICIES:
            raise ConfigError(f"on_error must be one of {ERROR_POLICIES}, got {self.on_error!r}")
        for name in ("settle_delay", "list_settle_delay", "polite_delay"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.limit is not None and self.limit < 0:
            raise ConfigError("limit must not be negative")
        return self

    def with_overrides(self, **changes) -> "ScrapeConfig":
        return replace(self, **changes)
