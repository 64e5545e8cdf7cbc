"""
Similarity computation utilities.

Provides shared functions for comparing editor names.
"""

from editor_finder.similarity.names import (
    name_key,
    name_similarity,
    normalize_name,
)

__all__ = [
    "name_key",
    "name_similarity",
    "normalize_name",
]
