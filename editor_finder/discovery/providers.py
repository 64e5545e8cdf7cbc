"""
Discovery collaborator: external "search" and "fetch".

``DiscoveryProvider`` is the boundary the core depends on. Both operations
raise ``DiscoveryUnavailable`` on failure; an empty search returns ``[]``
so callers can tell "nothing found" from "could not ask".
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup

from editor_finder.config import get_apify_api_token
from editor_finder.constants import DEFAULT_DISCOVERY_TIMEOUT
from editor_finder.errors import DiscoveryUnavailable

logger = logging.getLogger(__name__)

APIFY_RAG_BROWSER_URL = (
    "https://api.apify.com/v2/acts/apify/rag-web-browser/run-sync-get-dataset-items"
)
USER_AGENT = "editor_finder/0.1 (television editor directory)"

# Markup that never carries readable page text
NON_CONTENT_TAGS = ("script", "style", "noscript", "nav", "footer", "header", "form")


@dataclass(frozen=True)
class SearchHit:
    """One ranked search result. ``content`` is set when the provider inlines page text."""

    url: str
    title: str = ""
    content: str | None = None


class DiscoveryProvider(ABC):
    """External search-and-fetch service."""

    name: str = "discovery"

    @abstractmethod
    def search(self, query: str, max_results: int) -> list[SearchHit]:
        """
        Ranked result locators for a query.

        Raises:
            DiscoveryUnavailable: If the provider could not be queried
        """
        ...

    @abstractmethod
    def fetch(self, locator: str) -> str:
        """
        Raw readable content behind a locator.

        Raises:
            DiscoveryUnavailable: If the page could not be fetched
        """
        ...


def html_to_text(html: str) -> str:
    """Readable text from an HTML page, one block per line."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


class HttpPageFetcher:
    """Plain GET of a page, converted to text with BeautifulSoup."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_DISCOVERY_TIMEOUT,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        try:
            response = self.session.get(url, headers={"User-Agent": USER_AGENT}, timeout=self.timeout)
        except requests.RequestException as e:
            raise DiscoveryUnavailable(f"GET {url} failed: {e}", locator=url) from e
        if response.status_code != 200:
            raise DiscoveryUnavailable(f"GET {url} returned HTTP {response.status_code}", locator=url)
        content_type = response.headers.get("Content-Type", "")
        if "html" in content_type or response.text.lstrip().startswith("<"):
            return html_to_text(response.text)
        return response.text


class ApifyRagBrowserProvider(DiscoveryProvider):
    """
    Search through Apify's RAG web browser actor.

    The actor runs a web search and returns each hit's page as markdown, so
    most hits arrive with inline content and ``fetch`` is only needed for
    hits without it.
    """

    name = "apify-rag"

    def __init__(
        self,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_DISCOVERY_TIMEOUT,
        page_fetcher: HttpPageFetcher | None = None,
    ):
        self.token = token or get_apify_api_token()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.page_fetcher = page_fetcher or HttpPageFetcher(self.session, timeout)

    def search(self, query: str, max_results: int) -> list[SearchHit]:
        payload = {
            "query": query,
            "maxResults": max_results,
            "outputFormats": ["markdown"],
            "htmlTransformer": "readable text",
            "removeCookieWarnings": True,
            "requestTimeoutSecs": int(self.timeout),
        }
        try:
            response = self.session.post(
                APIFY_RAG_BROWSER_URL,
                params={"token": self.token},
                json=payload,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout + 10,
            )
        except requests.RequestException as e:
            raise DiscoveryUnavailable(f"Apify search failed: {e}", query=query) from e
        if response.status_code not in (200, 201):
            raise DiscoveryUnavailable(
                f"Apify search returned HTTP {response.status_code}", query=query
            )
        try:
            items = response.json()
        except ValueError as e:
            raise DiscoveryUnavailable(f"Apify returned invalid JSON: {e}", query=query) from e

        hits = []
        for item in items or []:
            metadata = item.get("metadata") or {}
            url = item.get("url") or metadata.get("url")
            if not url:
                continue
            hits.append(
                SearchHit(url=url, title=metadata.get("title", ""), content=item.get("markdown"))
            )
        logger.debug(f"Apify returned {len(hits)} hits for '{query}'")
        return hits[:max_results]

    def fetch(self, locator: str) -> str:
        return self.page_fetcher.fetch(locator)
