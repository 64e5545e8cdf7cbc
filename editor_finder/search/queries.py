"""
Discovery query building.

The free-text part of a filter is first classified into an explicit query
kind; query templates then switch on that kind. Output is deterministic for
a given filter and capped at ``MAX_DISCOVERY_QUERIES``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from editor_finder.constants import MAX_DISCOVERY_QUERIES
from editor_finder.domain.models import SearchFilter
from editor_finder.parsing.vocabulary import Vocabulary, load_vocabulary

logger = logging.getLogger(__name__)

MIN_ENTITY_TOKENS = 2
MAX_ENTITY_TOKENS = 6
# Lower-case words allowed inside a capitalized title ("House of the Dragon")
TITLE_CONNECTORS = frozenset({"a", "an", "and", "at", "for", "in", "of", "on", "the", "to"})


@dataclass(frozen=True)
class NamedEntityQuery:
    """Text that names a specific show or person."""

    text: str


@dataclass(frozen=True)
class CategoryQuery:
    """Text containing a category keyword (genre / format)."""

    text: str
    category: str


@dataclass(frozen=True)
class KeywordQuery:
    """Free text that is neither a named entity nor a category."""

    text: str


@dataclass(frozen=True)
class StructuredOnlyQuery:
    """No free text; only structured constraints."""


QueryKind = NamedEntityQuery | CategoryQuery | KeywordQuery | StructuredOnlyQuery


def _looks_like_title(text: str) -> bool:
    tokens = text.split()
    if not MIN_ENTITY_TOKENS <= len(tokens) <= MAX_ENTITY_TOKENS:
        return False
    if not tokens[0][:1].isupper():
        return False
    for token in tokens[1:]:
        first = token[:1]
        if first.isalpha() and not first.isupper() and token.lower() not in TITLE_CONNECTORS:
            return False
    return True


def _unique(parts: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for part in parts:
        key = part.lower().strip()
        if key and key not in seen:
            seen.add(key)
            ordered.append(part.strip())
    return ordered


class DiscoveryQueryBuilder:
    """Turn a SearchFilter into 1-3 external search queries."""

    def __init__(self, vocabulary: Vocabulary | None = None, max_queries: int = MAX_DISCOVERY_QUERIES):
        self.vocabulary = vocabulary or load_vocabulary()
        self.max_queries = max_queries

    @property
    def exclusions(self) -> str:
        return " ".join(f"-{role}" for role in self.vocabulary.confusable_roles)

    def classify(self, text: str) -> QueryKind:
        """Classify free text. Empty text means a structured-only query."""
        text = text.strip()
        if not text:
            return StructuredOnlyQuery()
        if self.vocabulary.is_known_entity(text):
            return NamedEntityQuery(text)
        category = self.vocabulary.find_category(text)
        if category is not None:
            return CategoryQuery(text, category)
        role_word = self.vocabulary.role_noun.lower().split()[-1]
        if _looks_like_title(text) and role_word not in text.lower():
            return NamedEntityQuery(text)
        return KeywordQuery(text)

    def generic_query(self, search_filter: SearchFilter) -> str:
        """Fallback query combining every available term."""
        parts = _unique(
            [search_filter.text]
            + search_filter.tags
            + search_filter.affiliations
            + search_filter.cities
            + search_filter.states
            + [self.vocabulary.role_noun]
        )
        return " ".join(parts)

    def build(self, search_filter: SearchFilter) -> list[str]:
        """Build the ranked query list (always at least the generic fallback)."""
        kind = self.classify(search_filter.text)
        noun = self.vocabulary.role_noun
        queries: list[str] = []

        if isinstance(kind, NamedEntityQuery):
            queries.append(f'"{kind.text}" {noun} picture editor crew {self.exclusions}')
            queries.append(f'"{kind.text}" post-production editing department {self.exclusions}')
        elif isinstance(kind, CategoryQuery):
            queries.append(f"{kind.text} {noun} film editor")
            queries.append(f"{kind.text} TV series picture editor")
        elif isinstance(kind, KeywordQuery):
            queries.append(f'"{kind.text}" {noun} picture editor {self.exclusions}')
        else:
            terms = search_filter.affiliations[:1] + search_filter.tags[:1]
            if terms:
                queries.append(" ".join(_unique(terms + [noun])))

        queries = _unique(queries)[: self.max_queries - 1]
        fallback = self.generic_query(search_filter)
        if fallback.lower() not in {q.lower() for q in queries}:
            queries.append(fallback)
        logger.debug(f"Built {len(queries)} discovery queries for {type(kind).__name__}")
        return queries[: self.max_queries]
