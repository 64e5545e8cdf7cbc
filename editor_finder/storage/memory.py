"""
In-memory record store.

Used by tests and as the default store for one-off CLI runs. Reads take a
snapshot under the lock, so concurrent readers never observe a half-written
record.
"""

import threading
from collections.abc import Iterator, Sequence

from editor_finder.domain.models import Record
from editor_finder.storage.base import Predicate, QueryPage, RecordStore, validate_for_write


class InMemoryRecordStore(RecordStore):
    """Dict-backed store keyed by record id."""

    def __init__(self, records: Sequence[Record] | None = None):
        self._lock = threading.Lock()
        self._records: dict[str, Record] = {}
        for record in records or []:
            self.upsert(record)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def query(self, predicates: Sequence[Predicate], limit: int) -> QueryPage:
        with self._lock:
            snapshot = [r.copy() for r in self._records.values()]
        docs = [(record, record.to_dict()) for record in snapshot]
        matched = [r for r, doc in docs if all(p.matches(doc) for p in predicates)]
        matched.sort(key=lambda r: r.updated_at, reverse=True)
        return QueryPage(records=matched[:limit], total=len(matched))

    def get(self, record_id: str) -> Record | None:
        with self._lock:
            record = self._records.get(record_id)
            return record.copy() if record else None

    def upsert(self, record: Record) -> None:
        validate_for_write(record)
        with self._lock:
            self._records[record.id] = record.copy()

    def all_records(self) -> Iterator[Record]:
        with self._lock:
            snapshot = [r.copy() for r in self._records.values()]
        yield from snapshot
