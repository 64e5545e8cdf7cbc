"""
Hybrid retriever: the single public search entry point.

Flow for one ``search`` call:
1. Answer from the local store
2. Ask the fallback policy whether coverage is too thin
3. If so, build discovery queries and run one batch per query on a small
   thread pool: fetch pages, parse Candidates, resolve and merge them
4. Blend local and discovered records, score them, return

A storage failure on the local query is reported in ``SearchResult.error``.
Discovery failures are soft. The caller's deadline bounds the whole call;
when it passes, in-flight batches are abandoned and whatever was already
merged is returned.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from editor_finder.cache import AppCache
from editor_finder.config import Settings, get_settings
from editor_finder.constants import MAX_DISCOVERED_RECORDS
from editor_finder.discovery.fetcher import DiscoveryFetcher
from editor_finder.discovery.providers import DiscoveryProvider
from editor_finder.domain.models import Candidate, Record, SearchFilter, utcnow
from editor_finder.entity_resolution.merger import (
    ConflictTracker,
    MergeAction,
    ResultMerger,
    blend,
)
from editor_finder.entity_resolution.resolver import EntityResolver, RecordIndex
from editor_finder.errors import DiscoveryUnavailable, StorageUnavailable
from editor_finder.parsing.content import ContentParser
from editor_finder.parsing.vocabulary import load_vocabulary
from editor_finder.reliability.scoring import ReliabilityScore, ReliabilityScorer
from editor_finder.search.local import LocalQueryEngine, build_facets
from editor_finder.search.policy import FallbackPolicy
from editor_finder.search.queries import DiscoveryQueryBuilder
from editor_finder.similarity.names import name_key
from editor_finder.sources.registry import load_registry
from editor_finder.storage.base import RecordStore
from editor_finder.utils.rate_limiting import get_rate_limiter
from editor_finder.utils.stats import ExecutionStats

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """
    Everything a caller gets back from ``search``.

    ``error`` is None unless the query itself failed; an empty ``records``
    list with ``error=None`` means nothing was found after an honest effort.
    """

    records: list[Record]
    total_count: int
    facets: dict[str, dict[str, int]]
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    discovery_used: bool = False
    timed_out: bool = False
    scores: dict[str, ReliabilityScore] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [
                {**r.to_dict(), "reliability": self.scores[r.id].to_dict()}
                if r.id in self.scores
                else r.to_dict()
                for r in self.records
            ],
            "total_count": self.total_count,
            "facets": self.facets,
            "error": self.error,
            "warnings": self.warnings,
            "discovery_used": self.discovery_used,
            "timed_out": self.timed_out,
        }


class DiscoveryRun:
    """
    State scoped to one discovery run.

    Holds the URLs and Candidates already handled, the records the run
    produced and its counters. A new instance per search keeps concurrent
    searches from seeing each other's state.
    """

    def __init__(self, index: RecordIndex, deadline: float, clock: Callable[[], float]):
        self.index = index
        self.deadline = deadline
        self.conflicts = ConflictTracker()
        self.stats = ExecutionStats(queries_ok=0, queries_failed=0)
        self.storage_error: str | None = None
        self._clock = clock
        self._lock = threading.Lock()
        self._seen_urls: set[str] = set()
        self._seen_candidates: set[tuple[str, int | None]] = set()
        self._records: dict[str, Record] = {}

    def expired(self) -> bool:
        return self._clock() >= self.deadline

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._clock())

    def claim_url(self, url: str) -> bool:
        """True the first time a URL is seen in this run."""
        with self._lock:
            if url in self._seen_urls:
                return False
            self._seen_urls.add(url)
            return True

    def claim_candidate(self, candidate: Candidate) -> bool:
        """True the first time a (name, start year) pair is seen in this run."""
        key = (name_key(candidate.name), candidate.start_year)
        with self._lock:
            if key in self._seen_candidates:
                return False
            self._seen_candidates.add(key)
            return True

    def add_record(self, record: Record) -> None:
        with self._lock:
            self._records[record.id] = record

    def records(self) -> list[Record]:
        with self._lock:
            return list(self._records.values())

    @property
    def all_failed(self) -> bool:
        return self.stats["queries_failed"] > 0 and self.stats["queries_ok"] == 0


class HybridRetriever:
    """Local search with discovery fallback, resolution and write-back."""

    def __init__(
        self,
        store: RecordStore,
        provider: DiscoveryProvider | None = None,
        settings: Settings | None = None,
        fetcher: DiscoveryFetcher | None = None,
        cache: AppCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            store: Record store (local coverage and write-back target)
            provider: External discovery service; None disables discovery
            settings: Tuning parameters (default: environment settings)
            fetcher: Preconfigured fetcher, overrides ``provider``
            cache: Disk cache for discovery output (None = no caching)
            clock: Monotonic clock, injected for tests
        """
        self.store = store
        self.settings = settings or get_settings()
        self._clock = clock

        vocabulary = load_vocabulary(self.settings.vocabulary_path)
        self.local = LocalQueryEngine(store, vocabulary)
        self.policy = FallbackPolicy(self.settings.fallback_min_text_hits)
        self.query_builder = DiscoveryQueryBuilder(vocabulary)
        self.parser = ContentParser(vocabulary)
        self.resolver = EntityResolver(self.settings.fuzzy_threshold, self.parser)
        self.merger = ResultMerger(store, self.resolver)
        self.scorer = ReliabilityScorer(load_registry(self.settings.sources_path))

        if fetcher is None and provider is not None:
            fetcher = DiscoveryFetcher(
                provider,
                rate_limiter=get_rate_limiter(provider.name, self.settings.discovery_rate_limit),
                cache=cache,
                max_results=self.settings.discovery_max_results,
                clock=clock,
            )
        self.fetcher = fetcher

    def search(self, search_filter: SearchFilter, deadline_seconds: float | None = None) -> SearchResult:
        """
        Search local records, falling back to discovery when coverage is thin.

        Args:
            search_filter: Caller query
            deadline_seconds: Overall time budget (default from settings)

        Returns:
            SearchResult; never raises for storage or discovery failures
        """
        budget = deadline_seconds or self.settings.search_deadline_seconds
        deadline = self._clock() + budget

        try:
            local = self.local.search(search_filter)
        except StorageUnavailable as e:
            logger.error(f"Local search failed: {e}")
            return SearchResult(records=[], total_count=0, facets=build_facets([]), error=str(e))

        applied = local.applied_filter
        result = SearchResult(
            records=local.records,
            total_count=local.total_count,
            facets=local.facets,
        )

        reason = self.policy.reason(local.total_count, applied.has_text, applied.has_filters)
        if reason is None:
            result.scores = self._score(result.records)
            return result
        if self.fetcher is None:
            logger.info(f"Discovery wanted ({reason}) but no provider is configured")
            result.warnings.append("Discovery is not configured; showing local results only")
            result.scores = self._score(result.records)
            return result

        logger.info(f"Falling back to discovery: {reason}")
        try:
            run = DiscoveryRun(RecordIndex.from_store(self.store), deadline, self._clock)
        except StorageUnavailable as e:
            logger.error(f"Cannot index records for resolution: {e}")
            result.error = str(e)
            return result

        result.discovery_used = True
        result.timed_out = self._discover(applied, run)

        discovered = run.records()[:MAX_DISCOVERED_RECORDS]
        local_ids = {r.id for r in local.records}
        result.records = blend(local.records, discovered, applied.limit)
        result.total_count = local.total_count + sum(1 for r in discovered if r.id not in local_ids)
        result.facets = build_facets(result.records)
        result.scores = self._score(result.records)

        if run.storage_error:
            result.error = run.storage_error
        elif run.all_failed and not local.records:
            result.warnings.append("All discovery queries failed; results may be incomplete")
        if result.timed_out:
            result.warnings.append(f"Search deadline of {budget:g}s reached; results are partial")
        logger.info(
            f"Search done: {len(local.records)} local + {len(discovered)} discovered "
            f"({run.stats.to_dict()})"
        )
        return result

    def _discover(self, search_filter: SearchFilter, run: DiscoveryRun) -> bool:
        """Run all discovery batches. Returns True if the deadline cut the run short."""
        queries = self.query_builder.build(search_filter)
        context = " ".join([search_filter.text] + search_filter.tags)
        executor = ThreadPoolExecutor(
            max_workers=self.settings.discovery_workers, thread_name_prefix="discovery"
        )
        timed_out = False
        try:
            futures = {executor.submit(self._run_batch, q, context, run): q for q in queries}
            for future in as_completed(futures, timeout=run.remaining()):
                query = futures[future]
                try:
                    future.result()
                    run.stats.increment("queries_ok")
                except DiscoveryUnavailable as e:
                    run.stats.increment("queries_failed")
                    logger.warning(f"Discovery query failed, skipping: '{query}': {e}")
                except StorageUnavailable as e:
                    run.stats.increment("queries_failed")
                    run.storage_error = str(e)
                    logger.error(f"Write-back failed for query '{query}': {e}")
        except TimeoutError:
            timed_out = True
            logger.warning("Search deadline reached; abandoning in-flight discovery")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return timed_out or run.expired()

    def _run_batch(self, query: str, context: str, run: DiscoveryRun) -> None:
        """One query: fetch, parse, then resolve and merge sequentially."""
        pages = self.fetcher.fetch(query, timeout=run.remaining(), claim_url=run.claim_url)
        for page in pages:
            for candidate in self.parser.parse(page.content, page.url, context):
                if run.expired():
                    return
                if not run.claim_candidate(candidate):
                    continue
                outcome = self.merger.merge(candidate, run.index, run.conflicts)
                run.stats.increment(outcome.action.value)
                if outcome.action is not MergeAction.REJECTED and outcome.record is not None:
                    run.add_record(outcome.record)

    def _score(self, records: list[Record]) -> dict[str, ReliabilityScore]:
        now = utcnow()
        return {r.id: self.scorer.score(r, now) for r in records}
