"""
Link Crawler
Single-hop crawl orchestration: load a root page, collect its links, and
fetch the rendered content of every accepted link over one browser session.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from .exceptions import SessionError
from .links import extract_links, normalize_links
from .loader import load_page
from .run_config import CrawlOptions
from .scope_filter import LinkFilter
from .scraper import fetch_page_content
from .session import BrowserSession, PlaywrightSession

logger = logging.getLogger(__name__)


class CrawlState(Enum):
    """Lifecycle of one ``LinkCrawler.crawl`` call."""
    IDLE = "idle"
    SESSION_STARTING = "session_starting"
    ROOT_LOADING = "root_loading"
    EXTRACTING_LINKS = "extracting_links"
    FETCHING_CONTENT = "fetching_content"
    SESSION_ENDING = "session_ending"
    DONE = "done"
    ERRORED = "errored"


@dataclass
class CrawlResult:
    """
    Result of a crawl operation.

    ``content[i]`` is the markup fetched from ``links[i]``. Unpacks as the
    ``(links, content)`` pair.
    """
    url: str = ""
    base_url: str = ""
    links: List[str] = field(default_factory=list)
    content: List[str] = field(default_factory=list)
    error: Optional[str] = None
    state: CrawlState = CrawlState.IDLE
    stats: Dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self):
        return iter((self.links, self.content))

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'base_url': self.base_url,
            'state': self.state.value,
            'error': self.error,
            'stats': self.stats,
            'pages': [
                {'url': link, 'content': html}
                for link, html in zip(self.links, self.content)
            ],
        }


class LinkCrawler:
    """
    Crawls one page and the pages it links to, using a single browser session.

    The session is opened at the start of ``crawl()`` and closed on every exit
    path. Failures after the session is open are reported on
    ``CrawlResult.error`` instead of being raised.
    """

    def __init__(
        self,
        session: Optional[BrowserSession] = None,
        options: Optional[CrawlOptions] = None,
    ):
        """
        Args:
            session: Browser session to drive; a ``PlaywrightSession`` built
                from ``options`` when omitted
            options: Crawl options (defaults when omitted)
        """
        self.options = options or CrawlOptions()
        self.session = session or PlaywrightSession(
            headless=self.options.headless,
            user_agent=self.options.user_agent,
            navigation_timeout_ms=self.options.navigation_timeout_ms,
        )
        self.state = CrawlState.IDLE
        self._progress_callback: Optional[Callable] = None

    def set_progress_callback(self, callback: Callable) -> None:
        """
        Set callback for progress updates.

        Args:
            callback: Function(pages_fetched, current_url, total_links)
        """
        self._progress_callback = callback

    def _transition(self, state: CrawlState) -> None:
        logger.debug(f"[CRAWL] {self.state.value} -> {state.value}")
        self.state = state

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Start the driver and open the session.

        On failure, teardown is attempted before ``SessionError`` propagates.
        """
        self._transition(CrawlState.SESSION_STARTING)
        try:
            self.session.start_driver()
            self.session.open()
        except Exception as e:
            logger.error(f"[SESSION] Could not start browser session: {e}")
            self._transition(CrawlState.ERRORED)
            try:
                self.session.close()
            except Exception as close_exc:
                logger.warning(f"[SESSION] Teardown after failed start also failed: {close_exc}")
            if isinstance(e, SessionError):
                raise
            raise SessionError(f"Could not start browser session: {e}") from e

    def end_session(self, result: Optional[CrawlResult] = None) -> None:
        """Close the session.

        ``close()`` is always called, even when restarting the driver fails.
        A teardown failure raises ``SessionError``, unless ``result`` already
        carries an error, in which case it is appended to that diagnostic.
        """
        self._transition(CrawlState.SESSION_ENDING)
        failure = None
        try:
            self.session.start_driver()
        except Exception as e:
            logger.warning(f"[SESSION] Driver restart before close failed: {e}")
            failure = ("driver start failed", e)
        finally:
            try:
                self.session.close()
            except Exception as e:
                logger.error(f"[SESSION] Could not close browser session: {e}")
                failure = failure or ("session close failed", e)

        if failure is None:
            self._transition(CrawlState.DONE)
            return

        stage, exc = failure
        if result is not None and result.error:
            result.error = f"{result.error}; {stage}: {exc}"
            self._transition(CrawlState.DONE)
            return
        self._transition(CrawlState.ERRORED)
        if isinstance(exc, SessionError):
            raise exc
        raise SessionError(f"Could not close browser session ({stage}): {exc}") from exc

    # ------------------------------------------------------------------
    # Crawl
    # ------------------------------------------------------------------

    def crawl(self, url: str) -> CrawlResult:
        """
        Crawl ``url`` and the pages it links to.

        Args:
            url: Root page URL

        Returns:
            CrawlResult with the accepted links and their content, or with
            ``error`` set if the crawl failed after the session was opened

        Raises:
            SessionError: If the session could not be opened or closed
        """
        logger.info(f"Starting crawl of {url}")
        result = CrawlResult(url=url, base_url=self.options.resolve_base_url(url))
        start_time = time.time()

        self.start_session()
        try:
            self._crawl_body(url, result)
        except Exception as e:
            self._transition(CrawlState.ERRORED)
            result.error = f"{type(e).__name__}: {e}"
            logger.error(f"Crawl of {url} failed: {result.error}", exc_info=True)
        finally:
            result.stats['elapsed_time'] = round(time.time() - start_time, 2)
            self.end_session(result)

        result.state = CrawlState.ERRORED if result.error else CrawlState.DONE
        logger.info(f"Crawl complete. Stats: {result.stats}")
        return result

    def _crawl_body(self, url: str, result: CrawlResult) -> None:
        opts = self.options

        self._transition(CrawlState.ROOT_LOADING)
        load_page(self.session, url, opts.initial_wait_ms, opts.retry_wait_ms, opts.max_load_retries)

        self._transition(CrawlState.EXTRACTING_LINKS)
        link_filter = LinkFilter(
            base_url=result.base_url,
            site_restricted=opts.site_restricted,
            domain_restricted=opts.domain_restricted,
        )
        link_filter.log_scope()

        raw_links = extract_links(self.session, opts.link_selector)
        links = link_filter.filter(normalize_links(raw_links, result.base_url))
        result.stats['links_found'] = len(raw_links)
        result.stats['links_accepted'] = len(links)
        result.stats['pages_fetched'] = 0
        logger.info(f"[LINKS] {len(links)} of {len(raw_links)} link(s) accepted on {url}")

        self._transition(CrawlState.FETCHING_CONTENT)
        for link in links:
            html = fetch_page_content(
                self.session,
                link,
                opts.content_selector,
                opts.initial_wait_ms,
                opts.retry_wait_ms,
                opts.max_load_retries,
            )
            result.links.append(link)
            result.content.append(html)
            result.stats['pages_fetched'] += 1
            self._notify_progress(result.stats['pages_fetched'], link, len(links))

    def _notify_progress(self, pages_fetched: int, link: str, total: int) -> None:
        if not self._progress_callback:
            return
        try:
            self._progress_callback(pages_fetched, link, total)
        except Exception as e:
            logger.warning(f"Progress callback raised: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        if self.session.is_open:
            self.session.close()


def scrape(
    url: str,
    options: Optional[CrawlOptions] = None,
    session: Optional[BrowserSession] = None,
    progress_callback: Optional[Callable] = None,
    **overrides,
) -> CrawlResult:
    """
    Convenience function to crawl a page and its links.

    Args:
        url: Root page URL
        options: Base options (defaults when omitted)
        session: Browser session (a new PlaywrightSession when omitted)
        progress_callback: Progress update callback
        **overrides: CrawlOptions fields to override

    Returns:
        CrawlResult with the fetched content
    """
    options = options or CrawlOptions()
    if overrides:
        options = options.with_overrides(**overrides)

    with LinkCrawler(session=session, options=options) as crawler:
        if progress_callback:
            crawler.set_progress_callback(progress_callback)
        return crawler.crawl(url)
