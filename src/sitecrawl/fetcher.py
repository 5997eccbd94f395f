"""
Fetching a single page and turning it into a Link.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional

import requests
from bs4 import BeautifulSoup, ParserRejectedMarkup, SoupStrainer

from sitecrawl.errors import RateLimitError
from sitecrawl.models import Link
from sitecrawl.ratelimit import RateLimiter
from sitecrawl.urls import is_absolute, resolve_relative, tld_matches, trim_anchor

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "crawler_exercise"

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

# Bytes read per chunk while streaming a body against the deadline
READ_CHUNK_SIZE = 8192


class DocumentParseError(Exception):
    """The response body could not be parsed as an HTML document."""


class BodyDeadlineExceeded(requests.Timeout):
    """The whole response body was not read within the request timeout."""


def parse_hrefs(body: bytes) -> List[str]:
    """Return the href of every <a> tag in document order."""
    try:
        soup = BeautifulSoup(body, "lxml", parse_only=LINK_STRAINER)
    except (ParserRejectedMarkup, ValueError) as e:
        raise DocumentParseError(str(e)) from e
    return [a["href"] for a in soup.find_all("a", href=True)]


def read_body(response: requests.Response, deadline: Optional[float]) -> bytes:
    """
    Read the response body, giving up once time.monotonic() passes deadline.

    The requests timeout only bounds each socket operation; this bounds the
    whole body so a server dripping bytes cannot stall a wave.
    """
    chunks: List[bytes] = []
    for chunk in response.iter_content(READ_CHUNK_SIZE):
        if deadline is not None and time.monotonic() > deadline:
            raise BodyDeadlineExceeded(f"body of {response.url} not read before deadline")
        chunks.append(chunk)
    return b"".join(chunks)


def extract_child_urls(tld: str, hrefs: List[str]) -> List[str]:
    """
    Classify hrefs found on a page and keep the same-site ones.

    Relative hrefs are joined onto tld and always kept unless they trim to
    nothing. Absolute hrefs are kept only when their host matches tld.
    Duplicates are preserved in document order.
    """
    children: List[str] = []
    for href in hrefs:
        if not is_absolute(href):
            if href.strip("/"):
                children.append(resolve_relative(tld, href))
        elif tld_matches(tld, href):
            children.append(trim_anchor(href))
    return children


def fetch_link(
    tld: str,
    url: str,
    timeout: float,
    limiter: RateLimiter,
    session: Optional[requests.Session] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    cancel: Optional[threading.Event] = None,
) -> Link:
    """
    Fetch url and return its Link.

    Never raises for a failed fetch: request, limiter, transport, status and
    parse failures are logged and reported through ``Link.errored``.
    A timeout of zero or less means no timeout. Otherwise it bounds each
    socket operation and also the whole exchange from the request being sent.
    """
    if timeout is not None and timeout <= 0:
        timeout = None

    if session is None:
        with requests.Session() as own_session:
            return fetch_link(tld, url, timeout, limiter, own_session, user_agent, cancel)

    try:
        prepared = session.prepare_request(
            requests.Request("GET", url, headers={"User-Agent": user_agent})
        )
    except (requests.RequestException, ValueError) as e:
        logger.warning("Error creating new request. %s", e)
        return Link(self_url=url, visited=True, errored=True)

    try:
        limiter.wait(cancel=cancel)
    except RateLimitError as e:
        logger.warning("Error with limiting execution: %s", e)
        return Link(self_url=url, visited=True, errored=True)

    logger.info("fetching url: %s", url)
    deadline = time.monotonic() + timeout if timeout is not None else None
    try:
        response = session.send(prepared, timeout=timeout, allow_redirects=True, stream=True)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Error fetching %s: %s", url, e)
        return Link(self_url=url, visited=True, errored=True)

    if response is None:
        return Link(self_url=url, visited=True, errored=True)

    with response:
        errored = False
        if response.status_code != requests.codes.ok:
            logger.debug("HTTP statuscode not OK: %d %s", response.status_code, url)
            errored = True

        try:
            body = read_body(response, deadline)
        except requests.RequestException as e:
            logger.warning("Error reading response body of %s: %s", url, e)
            return Link(self_url=url, visited=True, errored=True)

        try:
            hrefs = parse_hrefs(body)
        except DocumentParseError as e:
            logger.warning("Error loading document from response body. %s", e)
            return Link(self_url=url, visited=True, errored=True)

    return Link(
        self_url=url,
        visited=True,
        errored=errored,
        child_urls=tuple(extract_child_urls(tld, hrefs)),
    )
