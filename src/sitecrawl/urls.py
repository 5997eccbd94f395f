"""
Classification and normalization of discovered hrefs.
"""
from __future__ import annotations

import logging
from urllib.parse import urlsplit

from sitecrawl.errors import SeedURLError

logger = logging.getLogger(__name__)


def is_absolute(href: str) -> bool:
    """
    Check if href looks like an absolute URL.

    True when "://" appears before the first dot. Hrefs without a dot are
    never absolute (``http://localhost/x``), and scheme-relative hrefs
    (``//host/path``) are treated as relative.
    """
    if "://" not in href:
        return False
    return href.find("://") < href.find(".")


def _host(url: str) -> str:
    """Host component of url, port included, userinfo excluded."""
    netloc = urlsplit(url).netloc
    return netloc.rpartition("@")[2]


def tld_matches(tld: str, candidate_url: str) -> bool:
    """Check if candidate_url is on the same host as tld. Scheme and path are ignored."""
    try:
        tld_host = _host(tld)
    except ValueError:
        logger.warning("Cannot parse URL, excluding from the list %s", tld)
        return False

    try:
        candidate_host = _host(candidate_url)
    except ValueError:
        logger.warning("Cannot parse URL, excluding from the list %s", candidate_url)
        return False

    return tld_host == candidate_host


def trim_anchor(href: str) -> str:
    """Drop everything from the first '#' on."""
    return href.partition("#")[0]


def resolve_relative(tld: str, href: str) -> str:
    """Join a relative href onto tld with exactly one slash, without fragment."""
    return trim_anchor(tld.rstrip("/") + "/" + href.strip("/"))


def derive_tld(seed_url: str) -> str:
    """
    Derive the crawl boundary from the seed URL.

    Returns ``scheme://[userinfo@]host[:port]``. Raises SeedURLError when the
    seed is empty, unparseable, or has no scheme or host.
    """
    if not seed_url:
        raise SeedURLError("Please supply a URL to scrape")

    try:
        parsed = urlsplit(seed_url)
    except ValueError as e:
        raise SeedURLError(f"Cannot parse TLD from main URL {seed_url}: {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise SeedURLError(f"Cannot parse TLD from main URL {seed_url}")

    return f"{parsed.scheme}://{parsed.netloc}"
