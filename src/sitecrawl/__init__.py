"""
Same-site web crawler that fetches pages in concurrent, rate-limited waves
until no new links remain. Outputs the link graph of every visited page.
"""
from sitecrawl.core import Crawler, crawl, frontier
from sitecrawl.errors import CrawlerError, RateLimitError, SeedURLError
from sitecrawl.models import CrawlStats, Link
from sitecrawl.ratelimit import RateLimiter

__version__ = "1.0.0"
__all__ = [
    "Crawler",
    "CrawlerError",
    "CrawlStats",
    "Link",
    "RateLimitError",
    "RateLimiter",
    "SeedURLError",
    "crawl",
    "frontier",
]
