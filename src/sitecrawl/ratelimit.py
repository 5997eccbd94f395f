"""
Token bucket shared by every concurrent fetch of a crawl.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from sitecrawl.errors import LimiterCancelled, LimiterDeadlineExceeded


class RateLimiter:
    """
    Thread-safe token bucket.

    Tokens refill at ``rate`` per second up to ``burst``. The bucket starts
    full. ``wait()`` reserves a token under the lock and sleeps outside it,
    so callers are granted tokens in the order they reserved them.
    """

    __slots__ = ("_rate", "_burst", "_tokens", "_last", "_lock", "_clock")

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")
        self._rate = float(rate)
        self._burst = burst
        self._tokens = float(burst)
        self._clock = clock
        self._last = clock()
        self._lock = threading.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def burst(self) -> int:
        return self._burst

    def _advance(self, now: float) -> None:
        # Must be called with the lock held.
        elapsed = max(0.0, now - self._last)
        self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)
        self._last = now

    def _reserve(self) -> float:
        """Take one token, possibly going into debt. Returns the delay owed."""
        with self._lock:
            self._advance(self._clock())
            self._tokens -= 1.0
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self._rate

    def _release(self) -> None:
        """Give back a token that was reserved but never used."""
        with self._lock:
            self._advance(self._clock())
            self._tokens = min(float(self._burst), self._tokens + 1.0)

    def wait(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Block until a token is available.

        Args:
            cancel: Optional event; if it is set before or while waiting,
                the reservation is returned and LimiterCancelled is raised.
            timeout: Optional deadline in seconds. If the token would not be
                available in time, LimiterDeadlineExceeded is raised
                immediately without sleeping.
        """
        if cancel is not None and cancel.is_set():
            raise LimiterCancelled("rate limiter wait cancelled")

        delay = self._reserve()
        if timeout is not None and delay > timeout:
            self._release()
            raise LimiterDeadlineExceeded(
                f"would wait {delay:.3f}s, exceeding deadline of {timeout:.3f}s"
            )
        if delay <= 0:
            return

        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            self._release()
            raise LimiterCancelled("rate limiter wait cancelled")
