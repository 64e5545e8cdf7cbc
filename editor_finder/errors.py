"""
Exception hierarchy for editor_finder.

Only conditions a caller must react to are exceptions. A content block that
yields no candidates is not an error, and a resolution conflict is a logged
quality signal, so neither has a class here.
"""


class EditorFinderError(Exception):
    """Base class for all editor_finder errors."""


class ConfigurationError(EditorFinderError):
    """A required setting (usually an API key) is missing."""


class StorageUnavailable(EditorFinderError):
    """The record store could not be reached or rejected a query/write."""


class InvalidRecord(EditorFinderError):
    """A write was refused because the record breaks a persistence invariant."""


class DiscoveryUnavailable(EditorFinderError):
    """An external search or fetch failed (distinct from zero results)."""

    def __init__(self, message: str, query: str | None = None, locator: str | None = None):
        super().__init__(message)
        self.query = query
        self.locator = locator


class FeedUnavailable(EditorFinderError):
    """A third-party metadata feed request failed."""
