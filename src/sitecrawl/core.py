"""
Core crawling logic: wave-based BFS over same-site links.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter

from sitecrawl.fetcher import DEFAULT_USER_AGENT, fetch_link
from sitecrawl.models import CrawlStats, Link
from sitecrawl.ratelimit import RateLimiter
from sitecrawl.urls import derive_tld

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_RATE = 5.0

# Connection pool size for the shared session; waves can be much wider.
POOL_MAXSIZE = 32


def frontier(links: Iterable[Link]) -> List[str]:
    """
    Child URLs not yet present as a Link, in first-seen order.

    Each URL appears once, even when several pages link to it.
    """
    links = list(links)
    known = {link.self_url for link in links}
    pending: Dict[str, None] = {}
    for link in links:
        for child in link.child_urls:
            if child not in known:
                pending.setdefault(child, None)
    return list(pending)


def _log_link(link: Link) -> None:
    logger.debug(
        "Link: %s, visited: %s, errored: %s, child URLs: %s",
        link.self_url, link.visited, link.errored, list(link.child_urls),
    )


class Crawler:
    """
    Crawl every same-site page reachable from a seed URL.

    The seed is fetched first, then each wave fetches every child URL not
    yet present in the results, concurrently and behind a shared rate
    limiter. The crawl stops after a wave that discovers nothing new.
    Results are append-only and each URL is fetched at most once, so
    errored pages are never retried.
    """

    def __init__(
        self,
        seed_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_rate: float = DEFAULT_MAX_RATE,
        user_agent: str = DEFAULT_USER_AGENT,
        limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        # Raises SeedURLError before anything is fetched.
        self.tld = derive_tld(seed_url)
        self.seed_url = seed_url
        self.timeout = timeout
        self.user_agent = user_agent
        self.limiter = limiter if limiter is not None else RateLimiter(max_rate, burst=1)
        self._owns_session = session is None
        self.session = session if session is not None else _new_session()
        self.waves = 0
        self.links: List[Link] = []

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def _fetch(self, url: str) -> Link:
        return fetch_link(
            self.tld,
            url,
            self.timeout,
            self.limiter,
            session=self.session,
            user_agent=self.user_agent,
        )

    def _run_wave(self, urls: List[str]) -> List[Link]:
        """Fetch urls concurrently and return their Links in dispatch order."""
        with ThreadPoolExecutor(
            max_workers=len(urls), thread_name_prefix="sitecrawl-fetch"
        ) as pool:
            return list(pool.map(self._fetch, urls))

    def run(self) -> List[Link]:
        """Crawl to a fixed point and return every Link, seed first."""
        self.waves = 0
        seed_link = self._fetch(self.seed_url)
        self.links = [seed_link]
        _log_link(seed_link)

        pending = frontier(self.links)
        while pending:
            self.waves += 1
            logger.info("wave %d: fetching %d urls", self.waves, len(pending))

            for link in self._run_wave(pending):
                self.links.append(link)
                _log_link(link)

            pending = frontier(self.links)
            for url in pending:
                logger.debug("need another loop for: %s", url)

        logger.info(
            "crawl of %s finished: %d links in %d waves",
            self.tld, len(self.links), self.waves,
        )
        return self.links

    def stats(self) -> CrawlStats:
        return CrawlStats.from_links(self.links, waves=self.waves)


def _new_session() -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_maxsize=POOL_MAXSIZE)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def crawl(
    seed_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    max_rate: float = DEFAULT_MAX_RATE,
    user_agent: str = DEFAULT_USER_AGENT,
) -> List[Link]:
    """
    Crawl all same-site links starting from seed_url.

    Args:
        seed_url: The URL to start crawling from. Its scheme and host bound
            the crawl.
        timeout: HTTP request timeout in seconds.
        max_rate: Maximum requests per second across all fetches.
        user_agent: User-Agent header to use for requests.

    Returns:
        Every Link produced, one per distinct URL, seed first.

    Raises:
        SeedURLError: If seed_url is missing or cannot be parsed.
    """
    with Crawler(seed_url, timeout=timeout, max_rate=max_rate, user_agent=user_agent) as crawler:
        return crawler.run()
