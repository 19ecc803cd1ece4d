"""
Content Fetcher
Loads a linked page in the shared session and returns its outer markup.
"""

import logging
from typing import Optional

from .loader import (
    DEFAULT_INITIAL_WAIT_MS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_WAIT_MS,
    load_page,
)
from .session import BrowserSession

logger = logging.getLogger(__name__)

SELECTED_HTML_SCRIPT = "return document.querySelector(arguments[0])?.outerHTML || '';"
DOCUMENT_HTML_SCRIPT = "return document.documentElement.outerHTML;"


def fetch_page_content(
    session: BrowserSession,
    link: str,
    content_selector: Optional[str] = None,
    initial_wait_ms: int = DEFAULT_INITIAL_WAIT_MS,
    retry_wait_ms: int = DEFAULT_RETRY_WAIT_MS,
    max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
) -> str:
    """
    Fetch the rendered markup of a web page.

    Navigates ``session`` to ``link`` (replacing its current document) and
    waits for the load to complete.

    Args:
        session: Open browser session
        link: Absolute URL to load
        content_selector: CSS selector of the element to return; None returns
            the whole document
        initial_wait_ms: Load waiter initial sleep
        retry_wait_ms: Load waiter re-probe sleep
        max_retries: Load waiter re-probe ceiling

    Returns:
        Outer HTML of the selected element or of the document. An empty
        string when the selector matches nothing.
    """
    logger.info(f"[FETCH] loading: {link}")
    load_page(session, link, initial_wait_ms, retry_wait_ms, max_retries)

    if content_selector:
        html = session.execute_script(SELECTED_HTML_SCRIPT, content_selector)
    else:
        html = session.execute_script(DOCUMENT_HTML_SCRIPT)

    if not html:
        logger.debug(f"[FETCH] No content matched on {link}")
        return ""
    return html
