"""
Browser Session Gateway
=======================
The only place hopcrawl talks to a browser-automation backend.

The crawl core consumes a small, WebDriver-shaped capability set:

- ``start_driver()``                 — start the automation driver (idempotent)
- ``open()`` / ``close()``           — session lifecycle
- ``navigate(url)``
- ``execute_script(js, *args)``      — WebDriver-style script body, ``arguments[i]``
- ``find_elements("css", selector)``
- ``get_attribute(element, name)``

``BrowserSession`` defines that contract; ``PlaywrightSession`` implements it
on top of Playwright's sync API (Chromium).  Tests substitute an in-memory
session implementing the same abstract methods.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .exceptions import NavigationError, SessionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abstract gateway
# ---------------------------------------------------------------------------

class BrowserSession(ABC):
    """Abstract handle to one live browser-automation connection.

    Every operation acts on whatever document is currently loaded, so a
    session must never be shared by two crawls running at the same time.
    """

    # ── Lifecycle ─────────────────────────────────────────────────

    @abstractmethod
    def start_driver(self) -> None:
        """Start the automation driver if it is not already running."""
        ...

    @abstractmethod
    def open(self) -> None:
        """Open the browser session. Raises ``SessionError`` on failure."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the browser session. Raises ``SessionError`` on failure."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    # ── Commands ──────────────────────────────────────────────────

    @abstractmethod
    def navigate(self, url: str) -> None:
        ...

    @abstractmethod
    def execute_script(self, js: str, *args: Any) -> Any:
        """Run a WebDriver-style script body and return its value.

        The body may ``return`` a value and refers to its positional
        arguments as ``arguments[0]``, ``arguments[1]``, ...
        """
        ...

    @abstractmethod
    def find_elements(self, strategy: str, selector: str) -> List[Any]:
        ...

    @abstractmethod
    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        ...


# ---------------------------------------------------------------------------
# Playwright implementation
# ---------------------------------------------------------------------------

class PlaywrightSession(BrowserSession):
    """``BrowserSession`` backed by a single Playwright Chromium page."""

    DEFAULT_BROWSER_ARGS = ['--disable-gpu', '--no-sandbox', '--disable-dev-shm-usage']

    def __init__(
        self,
        headless: bool = True,
        user_agent: Optional[str] = None,
        navigation_timeout_ms: int = 30000,
        browser_args: Optional[List[str]] = None,
    ):
        """
        Args:
            headless: Run Chromium without a visible window
            user_agent: Override the browser's User-Agent (None keeps Chromium's)
            navigation_timeout_ms: Ceiling for a single ``navigate`` call
            browser_args: Extra Chromium command-line switches
        """
        self.headless = headless
        self.user_agent = user_agent
        self.navigation_timeout_ms = navigation_timeout_ms
        self.browser_args = list(browser_args) if browser_args is not None else list(self.DEFAULT_BROWSER_ARGS)

        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    def start_driver(self) -> None:
        if self._playwright is not None:
            return
        try:
            self._playwright = sync_playwright().start()
        except Exception as e:
            raise SessionError(f"Failed to start Playwright driver: {e}") from e
        logger.debug("[SESSION] Playwright driver started")

    def open(self) -> None:
        if self._page is not None:
            return
        self.start_driver()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=self.browser_args,
            )
            context_kwargs = {}
            if self.user_agent:
                context_kwargs['user_agent'] = self.user_agent
            self._context = self._browser.new_context(**context_kwargs)
            self._page = self._context.new_page()
        except PlaywrightError as e:
            raise SessionError(f"Failed to open browser session: {e}") from e
        logger.info(f"[SESSION] Browser session opened (headless={self.headless})")

    def close(self) -> None:
        """Close page, context and browser, then stop the driver.

        Every handle is released even when an earlier close fails; the first
        failure is reported afterwards as ``SessionError``.
        """
        first_error: Optional[Exception] = None

        for name in ('_context', '_browser'):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                handle.close()
            except PlaywrightError as e:
                logger.warning(f"[SESSION] Closing {name.strip('_')} failed: {e}")
                first_error = first_error or e
            setattr(self, name, None)
        self._page = None

        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as e:
                logger.warning(f"[SESSION] Stopping Playwright failed: {e}")
                first_error = first_error or e
            self._playwright = None

        if first_error is not None:
            raise SessionError(f"Failed to close browser session: {first_error}") from first_error
        logger.info("[SESSION] Browser session closed")

    def _require_page(self):
        if self._page is None:
            raise SessionError("Browser session is not open")
        return self._page

    def navigate(self, url: str) -> None:
        page = self._require_page()
        try:
            # Readiness is polled separately, so only wait for the commit
            page.goto(url, wait_until='commit', timeout=self.navigation_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}", url=url) from e

    def execute_script(self, js: str, *args: Any) -> Any:
        page = self._require_page()
        try:
            return page.evaluate(f"(arguments) => {{ {js} }}", list(args))
        except PlaywrightError as e:
            raise NavigationError(f"Script evaluation failed: {e}", url=page.url) from e

    def find_elements(self, strategy: str, selector: str) -> List[Any]:
        if strategy != 'css':
            raise ValueError(f"Unsupported element lookup strategy: {strategy}")
        page = self._require_page()
        try:
            return page.query_selector_all(selector)
        except PlaywrightError as e:
            raise NavigationError(f"Element query '{selector}' failed: {e}", url=page.url) from e

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        try:
            return element.get_attribute(name)
        except PlaywrightError as e:
            raise NavigationError(f"Reading attribute '{name}' failed: {e}") from e
