"""Per-source request limits over a sliding 60 second window."""

import os
import threading
import time
from collections import deque
from collections.abc import Callable

WINDOW_SECONDS = 60.0

# requests per window; RATE_LIMIT_<SOURCE> overrides a single entry
DEFAULT_LIMITS: dict[str, int] = {
    "web": 1000,
    "duckduckgo": 1000,
    "custom": 500,
    "linkedin": 500,
    "twitter": 500,
    "reddit": 500,
    "crunchbase": 500,
    "pitchbook": 500,
    "medium": 500,
    "substack": 500,
    "together": 500,
    "perplexity": 500,
}


def limits_from_env() -> dict[str, int]:
    """
    Default limits with environment overrides applied.

    Environment variables:
        RATE_LIMIT_<SOURCE>: Requests per minute for that source (e.g. RATE_LIMIT_LINKEDIN=50)
    """
    limits = dict(DEFAULT_LIMITS)
    for source in limits:
        override = os.getenv(f"RATE_LIMIT_{source.upper()}")
        if override:
            limits[source] = int(override)
    return limits


class RateLimiter:
    """
    Sliding-window request counter keyed by source name.

    Sources without a configured limit are never throttled. A request over
    the limit is refused rather than delayed.
    """

    def __init__(
        self,
        limits: dict[str, int] | None = None,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            limits: Requests allowed per window, keyed by lowercase source name
            window_seconds: Length of the sliding window
            clock: Monotonic time source in seconds
        """
        self._limits = {k.lower(): v for k, v in (DEFAULT_LIMITS if limits is None else limits).items()}
        self._window = window_seconds
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def try_acquire(self, source: str) -> bool:
        """
        Record one request for the source if it is under its limit.

        Returns:
            False when the source already used its limit inside the window
        """
        key = source.strip().lower()
        limit = self._limits.get(key)
        if limit is None:
            return True

        now = self._clock()
        with self._lock:
            times = self._requests.setdefault(key, deque())
            while times and now - times[0] >= self._window:
                times.popleft()
            if len(times) >= limit:
                return False
            times.append(now)
            return True

    def remaining(self, source: str) -> int | None:
        """Requests left in the current window; None for unlimited sources."""
        key = source.strip().lower()
        limit = self._limits.get(key)
        if limit is None:
            return None
        now = self._clock()
        with self._lock:
            recent = sum(1 for t in self._requests.get(key, ()) if now - t < self._window)
        return max(0, limit - recent)

    def reset(self):
        with self._lock:
            self._requests.clear()
