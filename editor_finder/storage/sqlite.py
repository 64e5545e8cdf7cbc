"""
SQLite-backed record store.

Each record is one JSON document row. SQL only orders rows by freshness;
predicates are evaluated in Python against the persisted layout, which keeps
the adapter a thin document store rather than a schema.
"""

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import closing
from pathlib import Path

from editor_finder.domain.models import Record
from editor_finder.errors import StorageUnavailable
from editor_finder.storage.base import Predicate, QueryPage, RecordStore, validate_for_write

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    id TEXT PRIMARY KEY,
    updated_at TEXT NOT NULL,
    doc TEXT NOT NULL
)
"""
INDEX = "CREATE INDEX IF NOT EXISTS idx_records_updated_at ON records(updated_at)"


class SqliteRecordStore(RecordStore):
    """
    Document store on a single SQLite file.

    A fresh connection is opened per operation so the store can be shared
    across worker threads. Writes are serialized by a process-level lock.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._write_lock = threading.Lock()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(SCHEMA)
                conn.execute(INDEX)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Cannot open record store at {self.db_path}: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=10.0)

    def _rows(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            # closing() closes the connection; the connection context manager only commits
            with closing(self._connect()) as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Record store query failed: {e}") from e

    def query(self, predicates: Sequence[Predicate], limit: int) -> QueryPage:
        rows = self._rows("SELECT doc FROM records ORDER BY updated_at DESC")
        matched: list[Record] = []
        total = 0
        for (raw,) in rows:
            doc = json.loads(raw)
            if all(p.matches(doc) for p in predicates):
                total += 1
                if len(matched) < limit:
                    matched.append(Record.from_dict(doc))
        return QueryPage(records=matched, total=total)

    def get(self, record_id: str) -> Record | None:
        rows = self._rows("SELECT doc FROM records WHERE id = ?", (record_id,))
        return Record.from_dict(json.loads(rows[0][0])) if rows else None

    def upsert(self, record: Record) -> None:
        validate_for_write(record)
        doc = record.to_dict()
        with self._write_lock:
            try:
                with closing(self._connect()) as conn, conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO records (id, updated_at, doc) VALUES (?, ?, ?)",
                        (record.id, doc["updated_at"], json.dumps(doc)),
                    )
            except sqlite3.Error as e:
                raise StorageUnavailable(f"Failed to write record {record.id}: {e}") from e
        logger.debug(f"Upserted record {record.id} ({record.name})")

    def all_records(self) -> Iterator[Record]:
        for (raw,) in self._rows("SELECT doc FROM records"):
            yield Record.from_dict(json.loads(raw))

    def count(self) -> int:
        return self._rows("SELECT COUNT(*) FROM records")[0][0]
