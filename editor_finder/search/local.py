"""
Local query engine.

Structured constraints become store predicates; free text is applied in
memory because the store is not assumed to support full-text search.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from editor_finder.constants import LOCAL_SCAN_LIMIT
from editor_finder.domain.models import Record, SearchFilter
from editor_finder.parsing.vocabulary import Vocabulary, load_vocabulary
from editor_finder.storage.base import AnyOf, Eq, In, Predicate, Range, RecordStore

logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 3  # Shorter query terms are too noisy to match on their own

EXPERIENCE_BUCKETS = ((5, "0-5 years"), (10, "5-10 years"))
EXPERIENCE_TOP_BUCKET = "10+ years"


@dataclass
class LocalResult:
    """Records answered from the local store, with facets over exactly those records."""

    records: list[Record]
    total_count: int
    facets: dict[str, dict[str, int]]
    applied_filter: SearchFilter = field(default_factory=SearchFilter)


def experience_bucket(years_active: int) -> str:
    for upper, label in EXPERIENCE_BUCKETS:
        if years_active < upper:
            return label
    return EXPERIENCE_TOP_BUCKET


def build_facets(records: list[Record]) -> dict[str, dict[str, int]]:
    """Counts per tag, affiliation, location label and experience bucket."""
    tags: Counter[str] = Counter()
    affiliations: Counter[str] = Counter()
    locations: Counter[str] = Counter()
    experience: Counter[str] = Counter()
    for record in records:
        tags.update(record.tags)
        affiliations.update(record.affiliations)
        locations[record.location.label] += 1
        experience[experience_bucket(record.years_active)] += 1
    return {
        "tags": dict(tags),
        "affiliations": dict(affiliations),
        "locations": dict(locations),
        "experience": dict(experience),
    }


def build_predicates(search_filter: SearchFilter) -> list[Predicate]:
    """Translate the structured part of a filter into store predicates."""
    predicates: list[Predicate] = []
    if search_filter.tags:
        predicates.append(AnyOf("tags", tuple(search_filter.tags)))
    if search_filter.affiliations:
        predicates.append(AnyOf("affiliations", tuple(search_filter.affiliations)))
    if search_filter.union_statuses:
        predicates.append(In("union_status", tuple(s.value for s in search_filter.union_statuses)))
    if search_filter.availabilities:
        predicates.append(In("availability", tuple(a.value for a in search_filter.availabilities)))
    if search_filter.experience.is_constrained:
        predicates.append(
            Range("years_active", search_filter.experience.min, search_filter.experience.max)
        )
    if search_filter.cities:
        predicates.append(In("location.city", tuple(search_filter.cities)))
    if search_filter.states:
        predicates.append(In("location.state", tuple(search_filter.states)))
    if search_filter.remote_only:
        predicates.append(Eq("location.remote", True))
    if search_filter.award_winners_only:
        predicates.append(Eq("award_winner", True))
    return predicates


def matches_text(record: Record, text: str) -> bool:
    """
    Case-insensitive substring match over name and tags.

    A record matches on the whole query, or on any query term of at least
    three characters.
    """
    needle = text.lower().strip()
    if not needle:
        return True
    haystacks = [record.name.lower()] + [tag.lower() for tag in record.tags]
    if any(needle in h for h in haystacks):
        return True
    terms = [t for t in needle.split() if len(t) >= MIN_TERM_LENGTH]
    return any(term in h for term in terms for h in haystacks)


class LocalQueryEngine:
    """Answers a SearchFilter from the local record store."""

    def __init__(
        self,
        store: RecordStore,
        vocabulary: Vocabulary | None = None,
        scan_limit: int = LOCAL_SCAN_LIMIT,
    ):
        self.store = store
        self.vocabulary = vocabulary or load_vocabulary()
        self.scan_limit = scan_limit

    def rewrite_category_query(self, search_filter: SearchFilter) -> SearchFilter:
        """Turn a query that is exactly a category keyword (e.g. "drama") into a tag."""
        tag = self.vocabulary.category_for(search_filter.text) if search_filter.has_text else None
        if tag is None:
            return search_filter
        logger.debug(f"Rewriting query '{search_filter.text}' as tag {tag}")
        tags = list(search_filter.tags)
        if tag.lower() not in {t.lower() for t in tags}:
            tags.append(tag)
        return search_filter.replace(query="", tags=tags)

    def search(self, search_filter: SearchFilter) -> LocalResult:
        """
        Run the filter against the store.

        Raises:
            StorageUnavailable: Propagated from the store, never turned into
                an empty result
        """
        applied = self.rewrite_category_query(search_filter)
        predicates = build_predicates(applied)
        limit = max(self.scan_limit, applied.limit)
        page = self.store.query(predicates, limit=limit)
        if applied.has_text and page.total > len(page.records):
            # Text is matched in memory, so it has to see every predicate match
            logger.debug(f"Text query needs all {page.total} predicate matches")
            page = self.store.query(predicates, limit=page.total)

        records = page.records
        if applied.has_text:
            records = [r for r in records if matches_text(r, applied.text)]
        kept = [r for r in records if not self.vocabulary.is_confusable_figure(r.name)]
        if len(kept) < len(records):
            logger.debug(f"Dropped {len(records) - len(kept)} known non-editor records")

        if applied.has_text:
            total = len(kept)
        else:
            total = page.total - (len(records) - len(kept))
        returned = kept[: applied.limit]
        logger.debug(
            f"Local search: {len(predicates)} predicates, {total} matches, "
            f"returning {len(returned)}"
        )
        return LocalResult(
            records=returned,
            total_count=total,
            facets=build_facets(returned),
            applied_filter=applied,
        )
