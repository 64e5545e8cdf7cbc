"""
Discovery fetcher: search, then fetch each result page.

Failures are soft at page level: a page that cannot be fetched is logged
and skipped. A failed search raises ``DiscoveryUnavailable`` after retries
so the caller can count failed queries; the orchestrator decides what an
all-failed run means.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from editor_finder.cache import PAGES_NAMESPACE, SEARCH_NAMESPACE, AppCache, hashed_key
from editor_finder.constants import (
    CACHE_TTL_DISCOVERY_PAGES,
    CACHE_TTL_NEGATIVE_RESULT,
    DEFAULT_DISCOVERY_MAX_RESULTS,
    DISCOVERY_RETRY_ATTEMPTS,
    DISCOVERY_RETRY_BACKOFF,
)
from editor_finder.discovery.providers import DiscoveryProvider, SearchHit
from editor_finder.errors import DiscoveryUnavailable
from editor_finder.utils.rate_limiting import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchedPage:
    """Raw content of one result page and where it came from."""

    query: str
    url: str
    content: str


class DiscoveryFetcher:
    """Rate-limited, retrying, cached access to a DiscoveryProvider."""

    def __init__(
        self,
        provider: DiscoveryProvider,
        rate_limiter: RateLimiter | None = None,
        cache: AppCache | None = None,
        max_results: int = DEFAULT_DISCOVERY_MAX_RESULTS,
        retry_attempts: int = DISCOVERY_RETRY_ATTEMPTS,
        retry_backoff: float = DISCOVERY_RETRY_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            provider: External search/fetch service
            rate_limiter: Shared limiter for the provider's endpoint (None = unlimited)
            cache: Disk cache for search hits and page text (None = no caching)
            max_results: Result pages requested per query
            retry_attempts: Attempts per call before giving up
            retry_backoff: First retry delay in seconds, doubled per attempt
            sleep: Injected for tests
            clock: Monotonic clock that deadlines are measured on
        """
        self.provider = provider
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.max_results = max_results
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._clock = clock

    def _expired(self, deadline: float | None) -> bool:
        return deadline is not None and self._clock() >= deadline

    def _call(self, func: Callable[[], T], what: str, deadline: float | None) -> T:
        last_error: DiscoveryUnavailable | None = None
        for attempt in range(self.retry_attempts):
            if attempt:
                delay = self.retry_backoff * 2 ** (attempt - 1)
                if deadline is not None and self._clock() + delay >= deadline:
                    break
                logger.debug(f"Retrying {what} in {delay:.1f}s (attempt {attempt + 1})")
                self._sleep(delay)
            if self.rate_limiter is not None:
                self.rate_limiter()
            try:
                return func()
            except DiscoveryUnavailable as e:
                last_error = e
        assert last_error is not None  # the first attempt always runs
        raise last_error

    def search(self, query: str, deadline: float | None = None) -> list[SearchHit]:
        """
        Search hits for a query (cached).

        Raises:
            DiscoveryUnavailable: If every attempt failed
        """
        key = hashed_key(f"{self.provider.name}|{self.max_results}|{query}")
        if self.cache is not None:
            cached = self.cache.get(SEARCH_NAMESPACE, key)
            if cached is not None:
                return [SearchHit(**hit) for hit in cached]

        hits = self._call(
            lambda: self.provider.search(query, self.max_results),
            f"search '{query}'",
            deadline,
        )
        if self.cache is not None:
            ttl = CACHE_TTL_DISCOVERY_PAGES if hits else CACHE_TTL_NEGATIVE_RESULT
            serialized = [{"url": h.url, "title": h.title, "content": h.content} for h in hits]
            self.cache.set(SEARCH_NAMESPACE, key, serialized, ttl_days=ttl)
        return hits

    def page_content(self, hit: SearchHit, deadline: float | None = None) -> str:
        """
        Content for a hit: inline content, cached text, or a provider fetch.

        Raises:
            DiscoveryUnavailable: If the page could not be fetched
        """
        if hit.content:
            return hit.content
        key = hashed_key(hit.url)
        if self.cache is not None:
            cached = self.cache.get(PAGES_NAMESPACE, key)
            if cached is not None:
                return cached
        content = self._call(lambda: self.provider.fetch(hit.url), f"fetch {hit.url}", deadline)
        if self.cache is not None:
            self.cache.set(PAGES_NAMESPACE, key, content, ttl_days=CACHE_TTL_DISCOVERY_PAGES)
        return content

    def fetch(
        self,
        query: str,
        timeout: float | None = None,
        claim_url: Callable[[str], bool] | None = None,
    ) -> list[FetchedPage]:
        """
        Search a query and collect the content of each result page.

        Args:
            query: External search query
            timeout: Seconds left for this query; no new call starts after that
            claim_url: Per-run dedup hook; pages it refuses are skipped

        Returns:
            Fetched pages in result order (possibly empty)

        Raises:
            DiscoveryUnavailable: If the search itself failed
        """
        deadline = None if timeout is None else self._clock() + timeout
        hits = self.search(query, deadline)
        pages: list[FetchedPage] = []
        for hit in hits:
            if self._expired(deadline):
                logger.info(f"Deadline reached while fetching results for '{query}'")
                break
            if claim_url is not None and not claim_url(hit.url):
                logger.debug(f"Skipping already fetched page {hit.url}")
                continue
            try:
                content = self.page_content(hit, deadline)
            except DiscoveryUnavailable as e:
                logger.warning(f"Skipping page {hit.url}: {e}")
                continue
            if content.strip():
                pages.append(FetchedPage(query=query, url=hit.url, content=content))
        logger.debug(f"Fetched {len(pages)}/{len(hits)} pages for '{query}'")
        return pages
