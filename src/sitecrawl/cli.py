"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from sitecrawl.core import DEFAULT_MAX_RATE, DEFAULT_TIMEOUT, Crawler
from sitecrawl.errors import SeedURLError
from sitecrawl.fetcher import DEFAULT_USER_AGENT
from sitecrawl.models import CrawlStats, Link

logger = logging.getLogger(__name__)


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total pages crawled:    {stats.pages_crawled}\n")
    sys.stderr.write(f"Pages with errors:      {stats.pages_errored}\n")
    sys.stderr.write(f"Child links found:      {stats.child_links}\n")
    sys.stderr.write(f"Waves:                  {stats.waves}\n")

    sys.stderr.write("\n")


def render_links(links: List[Link], indent: Optional[int] = 2) -> str:
    """Serialize links as a JSON document keyed by "links"."""
    payload = {"links": [link.to_dict() for link in links]}
    return json.dumps(payload, ensure_ascii=False, indent=indent)


def write_output(links: List[Link], out: str) -> None:
    """Write pretty JSON to out ('-' for stdout) and a compact copy to the debug log."""
    try:
        json_text = render_links(links)
        log_text = render_links(links, indent=None)
    except (TypeError, ValueError) as e:
        logger.warning("Cannot encode to JSON %s", e)
        return

    if out == "-":
        print(json_text)
    else:
        output_path = Path(out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text + "\n", encoding="utf-8")
        logger.info("Results written to: %s", output_path)

    logger.debug("%s", log_text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitecrawl",
        description="Crawl all same-site links starting from a URL and output JSON results.",
    )
    parser.add_argument("--url", default="", help="The URL to scrape (e.g. https://example.com)")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"The timeout of the individual requests in seconds, 0 for none (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--maxrate", type=float, default=DEFAULT_MAX_RATE,
        help=f"Requests per second (default: {DEFAULT_MAX_RATE:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", default="-", help="Output file path, or '-' for stdout (default: -)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging and a crawl summary")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.maxrate <= 0:
        logger.critical("--maxrate must be positive, got %s", args.maxrate)
        return 1
    if args.timeout < 0:
        logger.critical("--timeout must not be negative, got %s", args.timeout)
        return 1

    try:
        crawler = Crawler(
            args.url,
            timeout=args.timeout,
            max_rate=args.maxrate,
            user_agent=args.user_agent,
        )
    except SeedURLError as e:
        logger.critical("%s", e)
        return 1

    with crawler:
        links = crawler.run()

    if args.verbose:
        print_summary(crawler.stats())

    write_output(links, args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
