"""
Local search, fallback policy and discovery query building.
"""

from editor_finder.search.local import LocalQueryEngine, LocalResult, build_facets
from editor_finder.search.policy import FallbackPolicy
from editor_finder.search.queries import (
    CategoryQuery,
    DiscoveryQueryBuilder,
    KeywordQuery,
    NamedEntityQuery,
    StructuredOnlyQuery,
)

__all__ = [
    "CategoryQuery",
    "DiscoveryQueryBuilder",
    "FallbackPolicy",
    "KeywordQuery",
    "LocalQueryEngine",
    "LocalResult",
    "NamedEntityQuery",
    "StructuredOnlyQuery",
    "build_facets",
]
