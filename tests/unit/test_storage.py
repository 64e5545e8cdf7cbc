"""
Unit tests for editor_finder.storage (in-memory and SQLite stores).
"""

import sqlite3
from datetime import timedelta
from unittest.mock import patch

import pytest

from editor_finder.domain.models import Location, UnionStatus
from editor_finder.errors import InvalidRecord, StorageUnavailable
from editor_finder.storage import (
    AnyOf,
    Eq,
    In,
    InMemoryRecordStore,
    Range,
    SqliteRecordStore,
)


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Each test runs against both store implementations."""
    if request.param == "memory":
        return InMemoryRecordStore()
    return SqliteRecordStore(tmp_path / "editors.db")


class TestPredicates:
    """Test predicate evaluation over the persisted layout."""

    def test_eq_folds_case(self, make_record):
        doc = make_record("r1", "Walter Murch", union_status=UnionStatus.GUILD).to_dict()
        assert Eq("union_status", "GUILD").matches(doc)
        assert not Eq("union_status", "non-union").matches(doc)

    def test_nested_paths(self, make_record):
        doc = make_record("r1", "Walter Murch", location=Location("Austin", "TX")).to_dict()
        assert In("location.city", ("austin", "Dallas")).matches(doc)
        assert not Eq("location.remote", True).matches(doc)
        assert not Eq("location.missing.deeper", "x").matches(doc)

    def test_any_of_list_field(self, make_record):
        doc = make_record("r1", "Walter Murch", tags=["Drama", "Documentary"]).to_dict()
        assert AnyOf("tags", ("documentary",)).matches(doc)
        assert not AnyOf("tags", ("Comedy",)).matches(doc)

    def test_range_inclusive_and_missing_is_zero(self, make_record):
        doc = make_record("r1", "Walter Murch", years_active=10).to_dict()
        assert Range("years_active", 10, 10).matches(doc)
        assert not Range("years_active", min=11).matches(doc)
        doc["years_active"] = None
        assert Range("years_active", max=0).matches(doc)


class TestRecordStores:
    """Behaviour shared by every RecordStore."""

    def test_upsert_and_get(self, any_store, make_record):
        any_store.upsert(make_record("r1", "Walter Murch"))
        fetched = any_store.get("r1")
        assert fetched is not None
        assert fetched.name == "Walter Murch"
        assert any_store.get("missing") is None

    def test_upsert_replaces(self, any_store, make_record):
        any_store.upsert(make_record("r1", "Walter Murch"))
        any_store.upsert(make_record("r1", "Walter Murch", tags=["Documentary"]))
        assert any_store.get("r1").tags == ["Documentary"]
        assert len(list(any_store.all_records())) == 1

    def test_empty_provenance_is_refused(self, any_store, make_record):
        with pytest.raises(InvalidRecord):
            any_store.upsert(make_record("r1", "Walter Murch", origins=()))
        assert any_store.get("r1") is None

    def test_blank_name_is_refused(self, any_store, make_record):
        with pytest.raises(InvalidRecord):
            any_store.upsert(make_record("r1", "   "))

    def test_query_orders_by_freshness_and_counts_total(self, any_store, make_record, now):
        any_store.upsert(make_record("old", "Dede Allen", updated_at=now - timedelta(days=5)))
        any_store.upsert(make_record("new", "Sally Menke", updated_at=now))
        any_store.upsert(make_record("mid", "Verna Fields", updated_at=now - timedelta(days=1)))
        page = any_store.query([], limit=2)
        assert [r.id for r in page.records] == ["new", "mid"]
        assert page.total == 3

    def test_query_applies_every_predicate(self, any_store, make_record):
        any_store.upsert(make_record("r1", "Dede Allen", tags=["Drama"], years_active=20))
        any_store.upsert(make_record("r2", "Sally Menke", tags=["Drama"], years_active=3))
        any_store.upsert(make_record("r3", "Verna Fields", tags=["Comedy"], years_active=20))
        page = any_store.query([AnyOf("tags", ("drama",)), Range("years_active", min=10)], 10)
        assert [r.id for r in page.records] == ["r1"]

    def test_returned_records_are_copies(self, any_store, make_record):
        any_store.upsert(make_record("r1", "Walter Murch"))
        fetched = any_store.get("r1")
        fetched.tags.append("Comedy")
        assert "Comedy" not in any_store.get("r1").tags


class TestSqliteRecordStore:
    """SQLite-specific behaviour."""

    def test_persists_across_instances(self, tmp_path, make_record):
        path = tmp_path / "editors.db"
        SqliteRecordStore(path).upsert(make_record("r1", "Walter Murch", tags=["Drama"]))
        reopened = SqliteRecordStore(path)
        assert reopened.count() == 1
        assert reopened.get("r1").tags == ["Drama"]

    def test_sqlite_errors_become_storage_unavailable(self, tmp_path):
        store = SqliteRecordStore(tmp_path / "editors.db")
        with patch.object(store, "_connect", side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(StorageUnavailable):
                store.query([], limit=10)
