#!/usr/bin/env python3
"""
hopcrawl CLI
============
Crawl one page and the pages it links to, printing a summary and the
result as JSON.

All configuration flows through ``CrawlOptions``. Defaults can be seeded
from ``HOPCRAWL_*`` variables, including ones placed in a ``.env`` file.

Run with: python -m hopcrawl https://example.com
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .crawler import CrawlResult, LinkCrawler
from .exceptions import SessionError
from .run_config import CrawlOptions
from .session import PlaywrightSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CRAWL_FAILED = 1
EXIT_SESSION_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hopcrawl',
        description='Load a page in a browser and fetch the content of every page it links to',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hopcrawl https://example.com
  python -m hopcrawl https://example.com/docs --link-selector "nav.sidebar" --content-selector main
  python -m hopcrawl https://example.com --domain-restricted --output-json out.json
        """
    )

    parser.add_argument('url', help='URL of the root page')
    parser.add_argument('--link-selector', type=str, help='CSS selector of the link container (default: all anchors)')
    parser.add_argument('--content-selector', type=str, help='CSS selector of the element to extract from each page')
    parser.add_argument('--site-restricted', action='store_true', help='Only follow links starting with the base URL')
    parser.add_argument('--domain-restricted', action='store_true', help="Only follow links on the root page's host")
    parser.add_argument('--base-url', type=str, help='Base URL for relative links and site restriction')

    timing_group = parser.add_argument_group('Load waiting')
    timing_group.add_argument('--initial-wait', type=int, metavar='MS', help='Wait before the first readiness check (default: 1000)')
    timing_group.add_argument('--retry-wait', type=int, metavar='MS', help='Wait between readiness checks (default: 100)')
    timing_group.add_argument('--max-load-retries', type=str, metavar='N', help="Readiness re-checks before giving up, or 'none' to wait forever (default: 300)")

    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--output-json', type=str, metavar='PATH', help='Write the result to PATH instead of stdout')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def export_json(result: CrawlResult, filepath: str) -> str:
    """
    Export a crawl result to JSON.

    Returns:
        Absolute path to the created file
    """
    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)

    logger.info(f"Exported JSON to {output_path.absolute()}")
    return str(output_path.absolute())


def print_summary(result: CrawlResult) -> None:
    """Print crawl summary."""
    stats = result.stats
    print("\n" + "=" * 65, file=sys.stderr)
    print("CRAWL COMPLETE" if result.ok else "CRAWL FAILED", file=sys.stderr)
    print("=" * 65, file=sys.stderr)
    print(f"  Root URL:        {result.url}", file=sys.stderr)
    print(f"  Links found:     {stats.get('links_found', 0)}", file=sys.stderr)
    print(f"  Links accepted:  {stats.get('links_accepted', 0)}", file=sys.stderr)
    print(f"  Pages fetched:   {stats.get('pages_fetched', 0)}", file=sys.stderr)
    print(f"  Total time:      {stats.get('elapsed_time', 0):.1f}s", file=sys.stderr)
    if result.error:
        print(f"  Error:           {result.error}", file=sys.stderr)
    print("=" * 65, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Parse argv, build CrawlOptions, crawl, and report. Returns the exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )
    load_dotenv(find_dotenv(usecwd=True))

    url = args.url
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    try:
        options = CrawlOptions.from_cli_args(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CRAWL_FAILED
    options.log_summary(url)

    session = PlaywrightSession(
        headless=options.headless,
        user_agent=options.user_agent,
        navigation_timeout_ms=options.navigation_timeout_ms,
    )

    def progress_cb(pages_fetched, current_url, total):
        print(f"[Page {pages_fetched}/{total}] {current_url[:70]}", file=sys.stderr)

    crawler = LinkCrawler(session=session, options=options)
    crawler.set_progress_callback(progress_cb)
    try:
        result = crawler.crawl(url)
    except SessionError as e:
        logger.error(f"[SESSION] {e}")
        return EXIT_SESSION_FAILED

    if args.output_json:
        export_json(result, args.output_json)
    else:
        json.dump(result.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")

    print_summary(result)
    return EXIT_OK if result.ok else EXIT_CRAWL_FAILED


def run_cli_with_args() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run_cli_with_args()
