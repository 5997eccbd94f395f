"""
Data structures produced by a crawl.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple


@dataclass(slots=True, frozen=True)
class Link:
    """Result of fetching a single URL."""
    self_url: str
    visited: bool = False
    errored: bool = False
    child_urls: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form, keyed the way the JSON output expects."""
        return {
            "SelfURL": self.self_url,
            "Visited": self.visited,
            "Errored": self.errored,
            "ChildURLs": list(self.child_urls),
        }


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    pages_errored: int = 0
    child_links: int = 0
    waves: int = 0

    @classmethod
    def from_links(cls, links: Iterable[Link], waves: int = 0) -> "CrawlStats":
        stats = cls(waves=waves)
        for link in links:
            stats.record_link(link)
        return stats

    def record_link(self, link: Link) -> None:
        """Record one fetched page."""
        self.pages_crawled += 1
        if link.errored:
            self.pages_errored += 1
        self.child_links += len(link.child_urls)
