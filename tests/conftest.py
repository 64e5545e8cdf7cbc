"""
Pytest configuration and shared fixtures for editor_finder tests.
"""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from editor_finder.config import Settings
from editor_finder.discovery.fetcher import DiscoveryFetcher
from editor_finder.discovery.providers import DiscoveryProvider, SearchHit
from editor_finder.domain.models import Location, ProvenanceEntry, Record, UnionStatus
from editor_finder.errors import DiscoveryUnavailable
from editor_finder.storage.memory import InMemoryRecordStore

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _make_record(
    record_id: str,
    name: str,
    tags=("Drama",),
    affiliations=(),
    origins=("manual-curation",),
    updated_at: datetime = NOW,
    **kwargs,
) -> Record:
    """Build a persisted-shape Record with sensible defaults."""
    return Record(
        id=record_id,
        name=name,
        tags=list(tags),
        affiliations=list(affiliations),
        provenance=[ProvenanceEntry(o, updated_at) for o in origins],
        created_at=updated_at,
        updated_at=updated_at,
        **kwargs,
    )


class FakeProvider(DiscoveryProvider):
    """
    In-memory discovery provider.

    ``pages`` maps a query substring to a list of (url, content) pairs;
    content None means the page must be fetched through ``fetch``.
    """

    name = "fake"

    def __init__(
        self, pages=None, fetched=None, fail_queries=(), fail_all=False, block_queries=()
    ):
        self.pages = pages or {}
        self.fetched = fetched or {}
        self.fail_queries = tuple(fail_queries)
        self.fail_all = fail_all
        self.block_queries = tuple(block_queries)
        self.release = threading.Event()  # Set to unblock block_queries searches
        self.search_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self._lock = threading.Lock()

    def search(self, query, max_results):
        with self._lock:
            self.search_calls.append(query)
        if any(q in query for q in self.block_queries):
            self.release.wait(timeout=5)
        if self.fail_all or any(q in query for q in self.fail_queries):
            raise DiscoveryUnavailable("provider down", query=query)
        hits = []
        for needle, results in self.pages.items():
            if needle.lower() in query.lower():
                hits.extend(SearchHit(url=url, content=content) for url, content in results)
        return hits[:max_results]

    def fetch(self, locator):
        with self._lock:
            self.fetch_calls.append(locator)
        if locator not in self.fetched:
            raise DiscoveryUnavailable("404", locator=locator)
        return self.fetched[locator]


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, apify_api_token=None, tmdb_api_key=None)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def seeded_store():
    """Store with a handful of curated editors."""
    return InMemoryRecordStore(
        [
            _make_record(
                "r1",
                "Margaret Sixel",
                tags=["Drama", "Action"],
                affiliations=["HBO"],
                years_active=20,
                location=Location("Los Angeles", "CA", "USA", remote=False),
                union_status=UnionStatus.GUILD,
                award_winner=True,
                origins=("emmy-awards", "american-cinema-editors"),
            ),
            _make_record(
                "r2",
                "Walter Murch",
                tags=["Drama", "Documentary"],
                affiliations=["PBS"],
                years_active=25,
                location=Location("San Francisco", "CA", "USA", remote=True),
                union_status=UnionStatus.GUILD,
                updated_at=NOW - timedelta(days=3),
            ),
            _make_record(
                "r3",
                "Kelley Dixon",
                tags=["Comedy"],
                affiliations=["AMC"],
                years_active=8,
                location=Location("New York", "NY", "USA", remote=True),
                union_status=UnionStatus.NON_UNION,
                updated_at=NOW - timedelta(days=10),
            ),
        ]
    )


@pytest.fixture
def make_fetcher():
    """Fetcher factory with no rate limiting, caching or retry sleeps."""

    def _make(provider, **kwargs):
        kwargs.setdefault("rate_limiter", None)
        kwargs.setdefault("cache", None)
        kwargs.setdefault("retry_backoff", 0.0)
        kwargs.setdefault("sleep", lambda _: None)
        return DiscoveryFetcher(provider, **kwargs)

    return _make


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_record():
    """Factory for persisted-shape Records."""
    return _make_record


@pytest.fixture
def make_provider():
    """The FakeProvider class, for tests that configure their own pages."""
    return FakeProvider
