"""
Crawl Errors
============
Exception hierarchy shared by the session gateway, the load waiter and the
crawl orchestrator.

- ``SessionError``      — browser session could not be started, opened or closed
- ``NavigationError``   — navigation / script evaluation failed mid-crawl
- ``LoadTimeoutError``  — readiness probe never reported ``complete``

A content selector that matches nothing is *not* an error; the fetcher
returns an empty string for it.
"""

from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for every error raised by hopcrawl."""


class SessionError(CrawlError):
    """Browser session lifecycle failure (start / open / close)."""


class NavigationError(CrawlError):
    """Navigation, element query or script evaluation failure."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class LoadTimeoutError(NavigationError):
    """The document never reached ``readyState === 'complete'``."""

    def __init__(self, attempts: int, url: Optional[str] = None):
        where = f" for {url}" if url else ""
        super().__init__(
            f"Page did not finish loading{where} after {attempts} readiness checks",
            url=url,
        )
        self.attempts = attempts
