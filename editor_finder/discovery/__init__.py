"""
External discovery: provider interface, reference adapters and the fetcher.
"""

from editor_finder.discovery.fetcher import DiscoveryFetcher, FetchedPage
from editor_finder.discovery.providers import (
    ApifyRagBrowserProvider,
    DiscoveryProvider,
    HttpPageFetcher,
    SearchHit,
    html_to_text,
)

__all__ = [
    "ApifyRagBrowserProvider",
    "DiscoveryFetcher",
    "DiscoveryProvider",
    "FetchedPage",
    "HttpPageFetcher",
    "SearchHit",
    "html_to_text",
]
