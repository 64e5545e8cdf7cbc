"""
Storage collaborator interface.

The core treats the record store as a queryable document store: it accepts
equality / set-membership / range predicates over fields of the persisted
record layout (``Record.to_dict()``, dotted paths for nested fields) and
supports point upserts by identifier. No transactions are assumed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from editor_finder.domain.models import Record
from editor_finder.errors import InvalidRecord


def _lookup(doc: dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _fold(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


class Predicate(ABC):
    """A single constraint over one field of the persisted layout."""

    field: str

    @abstractmethod
    def matches(self, doc: dict[str, Any]) -> bool:
        """Evaluate against a persisted record dict."""
        ...


@dataclass(frozen=True)
class Eq(Predicate):
    """Field equals value (strings compare case-insensitively)."""

    field: str
    value: Any

    def matches(self, doc: dict[str, Any]) -> bool:
        return _fold(_lookup(doc, self.field)) == _fold(self.value)


@dataclass(frozen=True)
class In(Predicate):
    """Scalar field is one of values."""

    field: str
    values: tuple[Any, ...]

    def matches(self, doc: dict[str, Any]) -> bool:
        folded = {_fold(v) for v in self.values}
        return _fold(_lookup(doc, self.field)) in folded


@dataclass(frozen=True)
class AnyOf(Predicate):
    """List field shares at least one element with values."""

    field: str
    values: tuple[Any, ...]

    def matches(self, doc: dict[str, Any]) -> bool:
        items = _lookup(doc, self.field) or []
        folded = {_fold(v) for v in self.values}
        return any(_fold(item) in folded for item in items)


@dataclass(frozen=True)
class Range(Predicate):
    """Numeric field within inclusive bounds (None = unbounded)."""

    field: str
    min: float | None = None
    max: float | None = None

    def matches(self, doc: dict[str, Any]) -> bool:
        value = _lookup(doc, self.field)
        if value is None:
            value = 0
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass
class QueryPage:
    """A page of records plus the total number of matches."""

    records: list[Record]
    total: int


class RecordStore(ABC):
    """
    Abstract record store.

    Implementations must allow concurrent reads; writes are per-record
    upserts. Every write goes through ``validate_for_write``.
    """

    @abstractmethod
    def query(self, predicates: Sequence[Predicate], limit: int) -> QueryPage:
        """
        Return records matching every predicate, most recently updated first.

        Raises:
            StorageUnavailable: If the store cannot be queried
        """
        ...

    @abstractmethod
    def get(self, record_id: str) -> Record | None:
        """Point read by identifier."""
        ...

    @abstractmethod
    def upsert(self, record: Record) -> None:
        """
        Insert or replace a record by identifier.

        Raises:
            InvalidRecord: If the record breaks a persistence invariant
            StorageUnavailable: If the write fails
        """
        ...

    @abstractmethod
    def all_records(self) -> Iterator[Record]:
        """Iterate every stored record (used to build the resolution index)."""
        ...

    def close(self) -> None:  # noqa: B027
        """Release resources (no-op by default)."""


def validate_for_write(record: Record) -> None:
    """Reject records that may not be persisted."""
    if not record.id:
        raise InvalidRecord("Record has no identifier")
    if not record.name or not record.name.strip():
        raise InvalidRecord(f"Record {record.id} has no name")
    if not record.provenance:
        raise InvalidRecord(f"Record {record.id} has an empty provenance set")
