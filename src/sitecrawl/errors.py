"""
Exceptions raised by the crawler.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for crawler errors."""


class SeedURLError(CrawlerError, ValueError):
    """The seed URL is missing or cannot be parsed. Fatal before any fetch."""


class RateLimitError(CrawlerError):
    """A rate limiter wait did not produce a token."""


class LimiterCancelled(RateLimitError):
    """The wait was cancelled by the caller."""


class LimiterDeadlineExceeded(RateLimitError):
    """The token would not become available before the caller's deadline."""
