"""
editor_finder - hybrid search and entity resolution for television editors.

This package provides:
- Local search over a record store with structured filters and free text
- Fallback to external web discovery when local coverage is thin
- Candidate extraction, entity resolution and merge/write-back
- Reliability scoring from provenance, corroboration and freshness
- A TMDb crew sync and small CLI commands
"""

import logging

# Library use: callers configure their own handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

from editor_finder.domain.models import (  # noqa: E402
    Candidate,
    ExperienceRange,
    Record,
    SearchFilter,
)
from editor_finder.errors import (  # noqa: E402
    DiscoveryUnavailable,
    EditorFinderError,
    StorageUnavailable,
)
from editor_finder.retriever import HybridRetriever, SearchResult  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "Candidate",
    "ExperienceRange",
    "Record",
    "SearchFilter",
    # Errors
    "DiscoveryUnavailable",
    "EditorFinderError",
    "StorageUnavailable",
    # Entry point
    "HybridRetriever",
    "SearchResult",
]
