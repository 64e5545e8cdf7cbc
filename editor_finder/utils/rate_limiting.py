"""
Thread-safe rate limiting for external endpoints.

One limiter per endpoint enforces a minimum delay between consecutive
requests. Callers past the limit block, they are never queued.

Usage:
    limiter = get_rate_limiter("tmdb", requests_per_second=4.0)
    with limiter:
        session.get(url)
"""

import logging
import time
from threading import Lock

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Minimum-interval limiter shared by all threads hitting one endpoint.

    Args:
        requests_per_second: Maximum request rate (must be > 0)
        source_name: Endpoint name, for debugging
    """

    def __init__(self, requests_per_second: float, source_name: str = "default"):
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {requests_per_second}")
        self.requests_per_second = requests_per_second
        self.source_name = source_name
        self.min_interval = 1.0 / requests_per_second
        self._lock = Lock()
        self._last_call = 0.0

    def __call__(self) -> None:
        """Block until the minimum interval since the previous call has passed."""
        with self._lock:
            elapsed = time.monotonic() - self._last_call
            if elapsed < self.min_interval:
                wait = self.min_interval - elapsed
                logger.debug(f"Rate limiting {self.source_name}: sleeping {wait:.2f}s")
                time.sleep(wait)
            self._last_call = time.monotonic()

    def __enter__(self):
        self()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def reset(self) -> None:
        """Allow the next call immediately (tests)."""
        with self._lock:
            self._last_call = 0.0


_rate_limiters: dict[str, RateLimiter] = {}
_rate_limiters_lock = Lock()


def get_rate_limiter(source_name: str, requests_per_second: float) -> RateLimiter:
    """
    Get or create the shared limiter for an endpoint.

    The first caller fixes the rate; later callers get the same instance.
    """
    with _rate_limiters_lock:
        limiter = _rate_limiters.get(source_name)
        if limiter is None:
            limiter = RateLimiter(requests_per_second=requests_per_second, source_name=source_name)
            _rate_limiters[source_name] = limiter
        return limiter
