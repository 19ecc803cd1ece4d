"""
Crawl Options
=============
Single source of truth for hopcrawl defaults.

The CLI, the ``scrape()`` helper and the crawler all read from one frozen
``CrawlOptions`` value.  Environment variables (``HOPCRAWL_*``, optionally
loaded from a ``.env`` file by the CLI) seed the defaults; CLI flags and
keyword overrides win over them.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Optional

from .links import get_base_url

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults — the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "link_selector": "",
    "content_selector": None,
    "site_restricted": False,
    "domain_restricted": False,
    "base_url": None,                # None → scheme://host of the crawled URL
    "initial_wait_ms": 1000,
    "retry_wait_ms": 100,
    "max_load_retries": 300,         # readiness re-probes before LoadTimeoutError
    "headless": True,
    "user_agent": None,
    "navigation_timeout_ms": 30000,
}

_ENV_PREFIX = "HOPCRAWL_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_UNBOUNDED_VALUES = {"none", "unbounded"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{_ENV_PREFIX}{name} must be a boolean, got '{raw}'")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got '{raw}'") from None


def parse_retry_limit(raw: str, source: str = "max_load_retries") -> Optional[int]:
    """Parse a readiness retry limit; ``none`` or ``unbounded`` → None (poll forever)."""
    value = raw.strip().lower()
    if value in _UNBOUNDED_VALUES:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{source} must be an integer or 'none', got '{raw}'") from None


def _env_retry_limit(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    return parse_retry_limit(raw, _ENV_PREFIX + name)


@dataclass(frozen=True)
class CrawlOptions:
    """
    Immutable configuration for one crawl.

    Populate via:
      - ``CrawlOptions()``                   → all defaults
      - ``CrawlOptions(site_restricted=True)`` → override one value
      - ``CrawlOptions.from_env()``          → defaults seeded from HOPCRAWL_* vars
      - ``CrawlOptions.from_cli_args(ns)``   → from argparse Namespace
    """

    # ---- Link selection ----
    link_selector: str = _DEFAULTS["link_selector"]
    content_selector: Optional[str] = _DEFAULTS["content_selector"]

    # ---- Link filtering ----
    site_restricted: bool = _DEFAULTS["site_restricted"]
    domain_restricted: bool = _DEFAULTS["domain_restricted"]
    base_url: Optional[str] = _DEFAULTS["base_url"]

    # ---- Load waiting ----
    initial_wait_ms: int = _DEFAULTS["initial_wait_ms"]
    retry_wait_ms: int = _DEFAULTS["retry_wait_ms"]
    max_load_retries: Optional[int] = _DEFAULTS["max_load_retries"]

    # ---- Browser session ----
    headless: bool = _DEFAULTS["headless"]
    user_agent: Optional[str] = _DEFAULTS["user_agent"]
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]

    def __post_init__(self):
        if self.initial_wait_ms < 0 or self.retry_wait_ms < 0:
            raise ValueError("Wait times must not be negative")
        if self.max_load_retries is not None and self.max_load_retries < 0:
            raise ValueError("max_load_retries must not be negative")

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_env(cls, **overrides) -> "CrawlOptions":
        """Build options whose defaults come from ``HOPCRAWL_*`` env vars."""
        values = dict(
            initial_wait_ms=_env_int("INITIAL_WAIT_MS", _DEFAULTS["initial_wait_ms"]),
            retry_wait_ms=_env_int("RETRY_WAIT_MS", _DEFAULTS["retry_wait_ms"]),
            max_load_retries=_env_retry_limit("MAX_LOAD_RETRIES", _DEFAULTS["max_load_retries"]),
            headless=_env_bool("HEADLESS", _DEFAULTS["headless"]),
            user_agent=os.environ.get(_ENV_PREFIX + "USER_AGENT") or _DEFAULTS["user_agent"],
        )
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_cli_args(cls, args) -> "CrawlOptions":
        """Build options from an argparse Namespace (``__main__.py``).

        Flags left unset fall back to the environment-seeded defaults.
        """
        base = cls.from_env()
        overrides = {
            "link_selector": getattr(args, "link_selector", None) or base.link_selector,
            "content_selector": getattr(args, "content_selector", None),
            "site_restricted": getattr(args, "site_restricted", False),
            "domain_restricted": getattr(args, "domain_restricted", False),
            "base_url": getattr(args, "base_url", None),
        }
        for field_name, arg_name in (
            ("initial_wait_ms", "initial_wait"),
            ("retry_wait_ms", "retry_wait"),
        ):
            value = getattr(args, arg_name, None)
            if value is not None:
                overrides[field_name] = value
        # Kept as text by argparse so that "none" is distinguishable from unset.
        max_retries = getattr(args, "max_load_retries", None)
        if max_retries is not None:
            overrides["max_load_retries"] = parse_retry_limit(str(max_retries), "--max-load-retries")
        if getattr(args, "headed", False):
            overrides["headless"] = False
        return base.with_overrides(**overrides)

    def with_overrides(self, **overrides) -> "CrawlOptions":
        """Return a copy with ``overrides`` applied."""
        return dataclasses.replace(self, **overrides)

    def resolve_base_url(self, url: str) -> str:
        """The configured ``base_url``, or ``scheme://host`` of ``url``."""
        return self.base_url or get_base_url(url)

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, url: str) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("CRAWL OPTIONS")
        logger.info("=" * 60)
        logger.info(f"  URL:               {url}")
        logger.info(f"  Base URL:          {self.resolve_base_url(url)}")
        logger.info(f"  Link Selector:     {self.link_selector or '(all anchors)'}")
        logger.info(f"  Content Selector:  {self.content_selector or '(whole document)'}")
        logger.info(f"  Site Restricted:   {self.site_restricted}")
        logger.info(f"  Domain Restricted: {self.domain_restricted}")
        logger.info(f"  Load Wait:         {self.initial_wait_ms}ms then {self.retry_wait_ms}ms retries")
        if self.max_load_retries is None:
            logger.info("  Load Retries:      unbounded")
        else:
            logger.info(f"  Load Retries:      {self.max_load_retries} max")
        logger.info(f"  Headless:          {self.headless}")
        logger.info("=" * 60)
