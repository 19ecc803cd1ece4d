"""
hopcrawl
A single-hop, browser-driven link crawler.

Loads a page in a real browser, collects the links matching a selector,
filters them by site/domain, and returns the rendered markup of every
linked page.

CLI Usage:
    python -m hopcrawl <url> [options]

    Options:
        --link-selector      CSS selector of the link container (default: all anchors)
        --content-selector   CSS selector of the element to extract per page
        --site-restricted    Keep only links under the base URL
        --domain-restricted  Keep only links on the root page's host
        --base-url           Custom base URL for relative links and filtering
        --output-json        Write the result to a JSON file
"""

from .crawler import LinkCrawler, CrawlResult, CrawlState, scrape
from .run_config import CrawlOptions
from .session import BrowserSession, PlaywrightSession
from .loader import load_page, wait_for_page_load
from .links import extract_links, to_absolute_url, remove_duplicates, get_base_url
from .scope_filter import LinkFilter, accept_link
from .scraper import fetch_page_content
from .exceptions import CrawlError, SessionError, NavigationError, LoadTimeoutError

__all__ = [
    'LinkCrawler',
    'CrawlResult',
    'CrawlState',
    'scrape',
    'CrawlOptions',
    # Session gateway
    'BrowserSession',
    'PlaywrightSession',
    # Pipeline steps
    'load_page',
    'wait_for_page_load',
    'extract_links',
    'to_absolute_url',
    'remove_duplicates',
    'get_base_url',
    'LinkFilter',
    'accept_link',
    'fetch_page_content',
    # Errors
    'CrawlError',
    'SessionError',
    'NavigationError',
    'LoadTimeoutError',
]

__version__ = '0.1.0'
