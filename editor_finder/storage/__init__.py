"""
Record storage: the store interface, query predicates and reference adapters.
"""

from editor_finder.storage.base import (
    AnyOf,
    Eq,
    In,
    Predicate,
    QueryPage,
    Range,
    RecordStore,
    validate_for_write,
)
from editor_finder.storage.memory import InMemoryRecordStore
from editor_finder.storage.sqlite import SqliteRecordStore

__all__ = [
    "AnyOf",
    "Eq",
    "In",
    "InMemoryRecordStore",
    "Predicate",
    "QueryPage",
    "Range",
    "RecordStore",
    "SqliteRecordStore",
    "validate_for_write",
]
