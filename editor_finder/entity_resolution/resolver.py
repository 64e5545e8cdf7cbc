"""
Entity Resolver Module.

Matches a Candidate against existing Records:
1. Reject denylisted candidates
2. Exact match on the compact name key
3. Best fuzzy match at or above the threshold
4. Otherwise no match

Ties on the top score go to the most recently updated Record.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from editor_finder.constants import DEFAULT_FUZZY_THRESHOLD
from editor_finder.domain.models import Candidate, Record
from editor_finder.parsing.content import ContentParser
from editor_finder.similarity.names import name_key, name_similarity
from editor_finder.storage.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExactMatch:
    record_id: str


@dataclass(frozen=True)
class FuzzyMatch:
    record_id: str
    similarity: float


@dataclass(frozen=True)
class NoMatch:
    pass


@dataclass(frozen=True)
class Rejected:
    """The candidate failed validity checks and must never become a Record."""

    reason: str


MatchResult = ExactMatch | FuzzyMatch | NoMatch | Rejected


@dataclass(frozen=True)
class IndexEntry:
    record_id: str
    name: str
    key: str
    updated_at: datetime


class RecordIndex:
    """
    Thread-safe name index over existing Records.

    Resolution scans every entry, which is O(n) per candidate. That is fine
    for a professional directory (tens of thousands of records); a blocking
    index would be the next step beyond that.
    """

    def __init__(self, records: Iterable[Record] = ()):
        self._lock = threading.Lock()
        self._entries: dict[str, IndexEntry] = {}
        for record in records:
            self.add(record)

    @classmethod
    def from_store(cls, store: RecordStore) -> RecordIndex:
        return cls(store.all_records())

    def add(self, record: Record) -> None:
        """Insert or refresh the entry for a record."""
        entry = IndexEntry(record.id, record.name, name_key(record.name), record.updated_at)
        with self._lock:
            self._entries[record.id] = entry

    def entries(self) -> list[IndexEntry]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class EntityResolver:
    """Classifies a Candidate as exact, fuzzy, new or rejected."""

    def __init__(
        self,
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
        parser: ContentParser | None = None,
    ):
        """
        Args:
            threshold: Minimum similarity for a fuzzy match
            parser: Supplies the name denylists (default vocabulary)
        """
        self.threshold = threshold
        self.parser = parser or ContentParser()

    def resolve(self, candidate: Candidate, index: RecordIndex) -> MatchResult:
        if not candidate.name.strip() or self.parser.is_denylisted(candidate.name):
            logger.debug(f"Rejected candidate '{candidate.name}' from {candidate.origin_url}")
            return Rejected(f"invalid or denylisted name: {candidate.name}")

        key = name_key(candidate.name)
        entries = index.entries()

        exact = [e for e in entries if e.key == key]
        if exact:
            best = max(exact, key=lambda e: e.updated_at)
            return ExactMatch(best.record_id)

        best_entry: IndexEntry | None = None
        best_score = 0.0
        for entry in entries:
            score = name_similarity(candidate.name, entry.name)
            if score > best_score or (
                score == best_score
                and best_entry is not None
                and entry.updated_at > best_entry.updated_at
            ):
                best_entry, best_score = entry, score

        if best_entry is not None and best_score >= self.threshold:
            logger.debug(
                f"Fuzzy match '{candidate.name}' -> '{best_entry.name}' ({best_score:.3f})"
            )
            return FuzzyMatch(best_entry.record_id, best_score)
        return NoMatch()
