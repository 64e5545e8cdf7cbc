"""
Result Merger Module.

Applies MatchResults to the store and blends result lists:
- Exact / fuzzy match: union tags, affiliations and provenance into the
  existing Record, bump freshness, write back
- No match: promote the Candidate to a new Record and write it
- Rejected: nothing is written

Check-match-then-create runs under a lock per compact name, so one run never
creates two Records for the same name. Read-modify-write of an existing
Record runs under a lock per record id. Writes are synchronous: when
``merge`` returns, the store already holds the result.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from editor_finder.domain.models import Candidate, ProvenanceEntry, Record, utcnow
from editor_finder.entity_resolution.resolver import (
    EntityResolver,
    ExactMatch,
    FuzzyMatch,
    MatchResult,
    NoMatch,
    RecordIndex,
    Rejected,
)
from editor_finder.similarity.names import name_key
from editor_finder.storage.base import RecordStore

logger = logging.getLogger(__name__)


class MergeAction(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MergeOutcome:
    """What merging one Candidate did."""

    action: MergeAction
    match: MatchResult
    record: Record | None = None


class KeyedLocks:
    """
    One lock per key, created on first use and dropped once no thread holds
    or waits on it, so the table only covers keys currently in use.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}  # key -> (lock, users)

    def active_keys(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._guard:
                lock, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)


class ConflictTracker:
    """
    Spots two candidates in one run fuzzy-matching the same Record with
    different attributes. Both are still merged; the conflict is only logged.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._seen: dict[str, tuple[str, frozenset[str]]] = {}
        self.conflicts: list[tuple[str, str, str]] = []  # (record_id, first name, second name)

    def observe(self, record_id: str, candidate: Candidate) -> bool:
        """Record a fuzzy match; returns True if it conflicts with an earlier one."""
        signature = (name_key(candidate.name), frozenset(t.lower() for t in candidate.tags))
        with self._lock:
            previous = self._seen.setdefault(record_id, signature)
            if previous == signature:
                return False
            self.conflicts.append((record_id, previous[0], signature[0]))
        logger.warning(
            f"Resolution conflict on record {record_id}: '{candidate.name}' differs from an "
            f"earlier candidate matched to the same record"
        )
        return True


def apply_candidate(record: Record, candidate: Candidate, now: datetime | None = None) -> bool:
    """
    Union a Candidate into a Record in place.

    Returns True if anything changed; freshness is bumped only then, so
    applying the same Candidate twice leaves the Record as after the first.
    """
    now = now or utcnow()
    changed = record.add_tags(candidate.tags)
    changed = record.add_affiliations(candidate.affiliations) or changed
    changed = record.add_origin(candidate.origin_id, now) or changed
    if changed:
        record.touch(now)
    return changed


def promote(candidate: Candidate, now: datetime | None = None) -> Record:
    """New unverified Record from a Candidate, with a freshly minted id."""
    now = now or utcnow()
    return Record(
        id=str(uuid.uuid4()),
        name=" ".join(candidate.name.split()),
        tags=list(dict.fromkeys(candidate.tags)),
        affiliations=list(dict.fromkeys(candidate.affiliations)),
        years_active=candidate.years_active or 0,
        start_year=candidate.start_year,
        provenance=[ProvenanceEntry(candidate.origin_id, now)],
        created_at=now,
        updated_at=now,
        verified=False,
    )


def blend(local: list[Record], discovered: list[Record], limit: int) -> list[Record]:
    """
    Local records first, then discovered ones, deduplicated by id and capped.

    When a record appears in both lists the discovered (newer) copy is kept
    in the local position.
    """
    latest = {r.id: r for r in local}
    for record in discovered:
        current = latest.get(record.id)
        if current is None or record.updated_at >= current.updated_at:
            latest[record.id] = record
    ordered_ids = list(dict.fromkeys([r.id for r in local] + [r.id for r in discovered]))
    return [latest[record_id] for record_id in ordered_ids][:limit]


class ResultMerger:
    """Resolves Candidates and writes the outcome back to the store."""

    def __init__(
        self,
        store: RecordStore,
        resolver: EntityResolver,
        name_locks: KeyedLocks | None = None,
        record_locks: KeyedLocks | None = None,
    ):
        self.store = store
        self.resolver = resolver
        self.name_locks = name_locks if name_locks is not None else KeyedLocks()
        self.record_locks = record_locks if record_locks is not None else KeyedLocks()

    def merge(
        self,
        candidate: Candidate,
        index: RecordIndex,
        conflicts: ConflictTracker | None = None,
        now: datetime | None = None,
    ) -> MergeOutcome:
        """
        Resolve one Candidate and persist the result.

        Raises:
            StorageUnavailable: If the write fails
        """
        with self.name_locks.hold(name_key(candidate.name)):
            match = self.resolver.resolve(candidate, index)
            if isinstance(match, Rejected):
                return MergeOutcome(MergeAction.REJECTED, match)
            if isinstance(match, NoMatch):
                return self._create(candidate, match, index, now)

            if isinstance(match, FuzzyMatch) and conflicts is not None:
                conflicts.observe(match.record_id, candidate)
            return self._update(candidate, match, index, now)

    def _create(
        self, candidate: Candidate, match: MatchResult, index: RecordIndex, now: datetime | None
    ) -> MergeOutcome:
        record = promote(candidate, now)
        self.store.upsert(record)
        index.add(record)
        logger.info(f"Created record {record.id} for '{record.name}' from {candidate.origin_url}")
        return MergeOutcome(MergeAction.CREATED, match, record)

    def _update(
        self,
        candidate: Candidate,
        match: ExactMatch | FuzzyMatch,
        index: RecordIndex,
        now: datetime | None,
    ) -> MergeOutcome:
        with self.record_locks.hold(match.record_id):
            record = self.store.get(match.record_id)
            if record is None:
                logger.warning(f"Indexed record {match.record_id} no longer in store; recreating")
                return self._create(candidate, NoMatch(), index, now)
            if not apply_candidate(record, candidate, now):
                return MergeOutcome(MergeAction.UNCHANGED, match, record)
            self.store.upsert(record)
            index.add(record)
        logger.debug(f"Merged '{candidate.name}' into record {record.id}")
        return MergeOutcome(MergeAction.UPDATED, match, record)
