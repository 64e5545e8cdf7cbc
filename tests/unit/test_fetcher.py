"""
Unit tests for editor_finder.discovery.fetcher module.
"""

import logging
from unittest.mock import MagicMock

import pytest

from editor_finder.cache import SEARCH_NAMESPACE, AppCache
from editor_finder.discovery.providers import DiscoveryProvider, SearchHit
from editor_finder.errors import DiscoveryUnavailable


def _mock_provider(search_side_effect):
    provider = MagicMock(spec=DiscoveryProvider)
    provider.name = "mock"
    provider.search.side_effect = search_side_effect
    return provider


class TestDiscoveryFetcher:
    """Test search, page collection and failure handling."""

    def test_inline_content_needs_no_fetch(self, make_provider, make_fetcher):
        provider = make_provider(pages={"murch": [("https://a.example/1", "Edited by Walter Murch")]})
        pages = make_fetcher(provider).fetch("walter murch editor")
        assert [(p.url, p.content) for p in pages] == [
            ("https://a.example/1", "Edited by Walter Murch")
        ]
        assert provider.fetch_calls == []

    def test_missing_content_is_fetched(self, make_provider, make_fetcher):
        provider = make_provider(
            pages={"murch": [("https://a.example/1", None)]},
            fetched={"https://a.example/1": "Walter Murch - Editor"},
        )
        pages = make_fetcher(provider).fetch("walter murch")
        assert pages[0].content == "Walter Murch - Editor"
        assert pages[0].query == "walter murch"

    def test_page_failure_is_skipped_with_warning(self, make_provider, make_fetcher, caplog):
        provider = make_provider(
            pages={
                "murch": [
                    ("https://a.example/broken", None),
                    ("https://a.example/ok", "Walter Murch - Editor"),
                ]
            }
        )
        with caplog.at_level(logging.WARNING, logger="editor_finder.discovery.fetcher"):
            pages = make_fetcher(provider).fetch("walter murch")
        assert [p.url for p in pages] == ["https://a.example/ok"]
        assert "https://a.example/broken" in caplog.text

    def test_blank_pages_are_dropped(self, make_provider, make_fetcher):
        provider = make_provider(pages={"murch": [("https://a.example/1", "   ")]})
        assert make_fetcher(provider).fetch("murch") == []

    def test_empty_search_is_not_an_error(self, make_provider, make_fetcher):
        assert make_fetcher(make_provider()).fetch("nothing here") == []

    def test_search_failure_raises_after_retries(self, make_provider, make_fetcher):
        provider = make_provider(fail_all=True)
        delays = []
        fetcher = make_fetcher(provider, retry_attempts=3, retry_backoff=1.0, sleep=delays.append)
        with pytest.raises(DiscoveryUnavailable):
            fetcher.fetch("walter murch")
        assert len(provider.search_calls) == 3
        assert delays == [1.0, 2.0]

    def test_transient_failure_recovers(self, make_fetcher):
        provider = _mock_provider(
            [DiscoveryUnavailable("timeout"), [SearchHit("https://a.example/1", content="x")]]
        )
        pages = make_fetcher(provider).fetch("query")
        assert len(pages) == 1
        assert provider.search.call_count == 2

    def test_no_retry_past_deadline(self, make_provider, make_fetcher):
        provider = make_provider(fail_all=True)
        fetcher = make_fetcher(provider, retry_backoff=10.0)
        with pytest.raises(DiscoveryUnavailable):
            fetcher.fetch("walter murch", timeout=1.0)
        assert len(provider.search_calls) == 1

    def test_expired_deadline_fetches_no_pages(self, make_provider, make_fetcher):
        provider = make_provider(pages={"murch": [("https://a.example/1", "Walter Murch - Editor")]})
        pages = make_fetcher(provider).fetch("murch", timeout=0.0)
        assert pages == []

    def test_timeout_is_measured_on_injected_clock(self, make_provider, make_fetcher):
        provider = make_provider(
            pages={
                "murch": [
                    ("https://a.example/1", "Walter Murch - Editor"),
                    ("https://a.example/2", "Dede Allen - Editor"),
                ]
            }
        )
        ticks = iter([100.0, 101.0, 200.0])
        fetcher = make_fetcher(provider, clock=lambda: next(ticks))

        pages = fetcher.fetch("murch", timeout=5.0)

        assert [p.url for p in pages] == ["https://a.example/1"]

    def test_claimed_urls_are_skipped(self, make_provider, make_fetcher):
        provider = make_provider(
            pages={
                "murch": [
                    ("https://a.example/seen", "Walter Murch - Editor"),
                    ("https://a.example/new", "Dede Allen - Editor"),
                ]
            }
        )
        pages = make_fetcher(provider).fetch(
            "murch", claim_url=lambda url: not url.endswith("seen")
        )
        assert [p.url for p in pages] == ["https://a.example/new"]

    def test_rate_limiter_called_per_request(self, make_provider, make_fetcher):
        limiter = MagicMock()
        provider = make_provider(
            pages={"murch": [("https://a.example/1", None)]},
            fetched={"https://a.example/1": "Walter Murch - Editor"},
        )
        make_fetcher(provider, rate_limiter=limiter).fetch("murch")
        assert limiter.call_count == 2  # One search, one page fetch


class TestDiscoveryFetcherCache:
    """Test disk caching of search hits and page text."""

    def test_search_hits_are_cached(self, tmp_path, make_provider, make_fetcher):
        cache = AppCache(tmp_path / "cache")
        provider = make_provider(pages={"murch": [("https://a.example/1", "Walter Murch - Editor")]})
        fetcher = make_fetcher(provider, cache=cache)
        first = fetcher.fetch("murch")
        second = fetcher.fetch("murch")
        assert first == second
        assert len(provider.search_calls) == 1
        assert cache.count(SEARCH_NAMESPACE) == 1
        cache.close()

    def test_empty_results_are_cached(self, tmp_path, make_provider, make_fetcher):
        cache = AppCache(tmp_path / "cache")
        provider = make_provider()
        fetcher = make_fetcher(provider, cache=cache)
        fetcher.fetch("nobody")
        fetcher.fetch("nobody")
        assert len(provider.search_calls) == 1
        cache.close()

    def test_fetched_pages_are_cached(self, tmp_path, make_provider, make_fetcher):
        cache = AppCache(tmp_path / "cache")
        provider = make_provider(
            pages={"murch": [("https://a.example/1", None)]},
            fetched={"https://a.example/1": "Walter Murch - Editor"},
        )
        fetcher = make_fetcher(provider, cache=cache)
        hit = SearchHit("https://a.example/1")
        assert fetcher.page_content(hit) == "Walter Murch - Editor"
        assert fetcher.page_content(hit) == "Walter Murch - Editor"
        assert provider.fetch_calls == ["https://a.example/1"]
        cache.close()

    def test_failures_are_not_cached(self, tmp_path, make_provider, make_fetcher):
        cache = AppCache(tmp_path / "cache")
        provider = make_provider(fail_all=True)
        fetcher = make_fetcher(provider, cache=cache, retry_attempts=1)
        for _ in range(2):
            with pytest.raises(DiscoveryUnavailable):
                fetcher.search("murch")
        assert len(provider.search_calls) == 2
        cache.close()
