"""
Fallback decision policy: when is local coverage too thin?
"""

from dataclasses import dataclass

from editor_finder.constants import DEFAULT_MIN_TEXT_HITS


@dataclass(frozen=True)
class FallbackPolicy:
    """
    Decide whether a search must fall back to external discovery.

    Discovery runs when nothing was found for a constrained query, or when a
    free-text query found fewer than ``min_text_hits`` records. Structured
    filters are precise, so they only trigger on zero hits.
    """

    min_text_hits: int = DEFAULT_MIN_TEXT_HITS

    def should_discover(self, local_count: int, has_text: bool, has_filters: bool) -> bool:
        if local_count == 0 and (has_text or has_filters):
            return True
        return has_text and local_count < self.min_text_hits

    def reason(self, local_count: int, has_text: bool, has_filters: bool) -> str | None:
        """Human-readable trigger, or None when discovery is not needed."""
        if not self.should_discover(local_count, has_text, has_filters):
            return None
        if local_count == 0:
            return "no local matches"
        return f"only {local_count} local matches for free-text query"
