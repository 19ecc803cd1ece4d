"""
Page Load Waiter
Navigates a session and polls ``document.readyState`` until the page is loaded.
"""

import logging
import time
from typing import Optional

from .exceptions import LoadTimeoutError
from .session import BrowserSession

logger = logging.getLogger(__name__)

READY_STATE_SCRIPT = "return document.readyState === 'complete';"

DEFAULT_INITIAL_WAIT_MS = 1000
DEFAULT_RETRY_WAIT_MS = 100
DEFAULT_MAX_RETRIES = 300


def wait_for_page_load(
    session: BrowserSession,
    initial_wait_ms: int = DEFAULT_INITIAL_WAIT_MS,
    retry_wait_ms: int = DEFAULT_RETRY_WAIT_MS,
    max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
    url: Optional[str] = None,
) -> None:
    """
    Block until the session's current document reports ``complete``.

    The initial wait absorbs the navigation round-trip and any immediate
    client-side redirect; it is applied once. Every re-probe afterwards
    waits only ``retry_wait_ms``.

    Args:
        session: Session whose current document is polled
        initial_wait_ms: Sleep before the first readiness probe
        retry_wait_ms: Sleep before each re-probe
        max_retries: Re-probe ceiling; None polls forever
        url: Used only in log and error messages

    Raises:
        LoadTimeoutError: If ``max_retries`` re-probes all report not-ready
    """
    time.sleep(initial_wait_ms / 1000)

    retries = 0
    while session.execute_script(READY_STATE_SCRIPT) is not True:
        if max_retries is not None and retries >= max_retries:
            raise LoadTimeoutError(attempts=retries + 1, url=url)
        retries += 1
        time.sleep(retry_wait_ms / 1000)

    if retries:
        logger.debug(f"Page ready after {retries} re-probe(s): {url or '(current page)'}")


def load_page(
    session: BrowserSession,
    url: str,
    initial_wait_ms: int = DEFAULT_INITIAL_WAIT_MS,
    retry_wait_ms: int = DEFAULT_RETRY_WAIT_MS,
    max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
) -> None:
    """Navigate ``session`` to ``url`` and wait for it to finish loading.

    Does not open or close the session.
    """
    session.navigate(url)
    wait_for_page_load(session, initial_wait_ms, retry_wait_ms, max_retries, url=url)
