"""
Link Extraction & Normalization
Reads anchor hrefs from the current page and turns them into absolute,
fragment-free URLs.
"""

import logging
from typing import Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

from .session import BrowserSession

logger = logging.getLogger(__name__)

ANCHOR_SUFFIX = " a"


def link_selector_for(css_selector: Optional[str]) -> str:
    """
    Turn a container selector into one that targets its anchors.

    ``None`` is treated as ``""``. A selector already ending in ``" a"`` is
    used verbatim; anything else gets ``" a"`` appended, so ``""`` becomes
    ``" a"`` (every anchor on the page).
    """
    css_selector = css_selector or ""
    if css_selector.endswith(ANCHOR_SUFFIX):
        return css_selector
    return css_selector + ANCHOR_SUFFIX


def extract_links(session: BrowserSession, css_selector: Optional[str] = None) -> List[str]:
    """
    Return the raw ``href`` of every anchor matched by ``css_selector``.

    The list is returned as found: relative URLs, duplicates and in-page
    anchors included. Anchors without an ``href`` are skipped.
    """
    selector = link_selector_for(css_selector)
    elements = session.find_elements('css', selector)

    links = []
    for element in elements:
        href = session.get_attribute(element, 'href')
        if href is not None:
            links.append(href)

    logger.debug(f"[LINKS] {len(links)} link(s) for selector '{selector}': {links}")
    return links


def strip_fragment(link: str) -> str:
    """Drop everything from the first ``#`` onward."""
    return link.split('#', 1)[0]


def is_page_anchor(link: str) -> bool:
    """True for hrefs that only point inside the current page (``#top``, ``""``)."""
    return not strip_fragment(link.strip())


def to_absolute_url(link: str, base_url: str) -> str:
    """
    Normalize ``link`` against ``base_url``.

    The fragment is stripped. A scheme-less remainder is appended to
    ``base_url`` verbatim (no separator handling); a link with a scheme is
    re-serialized unchanged.
    """
    link = strip_fragment(link)
    parts = urlsplit(link)
    if not parts.scheme:
        return base_url + link
    return urlunsplit(parts)


def normalize_links(links: Iterable[str], base_url: str) -> List[str]:
    """Absolutize ``links`` and drop in-page anchors and duplicates."""
    absolute = [to_absolute_url(link, base_url) for link in links if not is_page_anchor(link)]
    return remove_duplicates(absolute)


def remove_duplicates(links: Iterable[str]) -> List[str]:
    """Remove duplicate URLs, keeping the first occurrence's position."""
    links = list(links)
    unique = list(dict.fromkeys(links))
    removed = len(links) - len(unique)
    if removed:
        logger.debug(f"[LINKS] Removed {removed} duplicate link(s)")
    return unique


def get_base_url(url: str) -> str:
    """Return ``scheme://host`` for ``url``."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.hostname or ''}"


def get_host(url: str) -> Optional[str]:
    """Host component of ``url`` (lower-cased by urllib), or None."""
    return urlsplit(url).hostname
