"""Unit tests for the record store implementations."""
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.core.exceptions import StorageError
from app.db.store import SqlRecordStore, UpdateStatus
from tests.utils import seed_record

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestConditionalUpdate:
    """The compare-and-set contract shared by both stores."""

    def test_applies_when_flag_matches(self, store):
        seed_record(store, "u1", "Alice")

        result = store.conditional_update("u1", expected_scanned=False,
                                          new_fields={"scanned": True, "scan_time": T0})

        assert result.status is UpdateStatus.APPLIED
        assert result.record.scanned is True
        assert result.record.scan_time == T0
        assert result.record.scanned_times == 1

    def test_conflict_when_flag_differs(self, store):
        seed_record(store, "u1", "Alice", scanned=True, scan_time=T0, scanned_times=1)

        result = store.conditional_update("u1", expected_scanned=False,
                                          new_fields={"scanned": True, "scan_time": T0})

        assert result.status is UpdateStatus.CONFLICT
        assert result.record is None
        assert store.find_by_id("u1").scanned_times == 1

    def test_not_found(self, store):
        result = store.conditional_update("missing", expected_scanned=False)

        assert result.status is UpdateStatus.NOT_FOUND

    def test_counter_only_update(self, store):
        seed_record(store, "u1", "Alice", scanned=True, scan_time=T0, scanned_times=4)

        result = store.conditional_update("u1", expected_scanned=True)

        assert result.status is UpdateStatus.APPLIED
        assert result.record.scanned_times == 5
        assert result.record.scan_time == T0

    def test_rejects_descriptive_fields(self, store):
        seed_record(store, "u1", "Alice")

        with pytest.raises(ValueError, match="not allowed"):
            store.conditional_update("u1", expected_scanned=False, new_fields={"name": "Mallory"})


@pytest.mark.unit
class TestRosterOperations:

    def test_create_many_starts_unscanned(self, store):
        created = store.create_many([
            {"name": "Alice", "title": "Chair", "district": "North", "region": "R1"},
            {"name": "Bob"},
        ])

        assert [r.name for r in created] == ["Alice", "Bob"]
        assert len({r.id for r in created}) == 2
        for record in created:
            assert record.scanned is False
            assert record.scanned_times == 0
            assert record.scan_time is None
            assert store.find_by_id(record.id) == record

    def test_list_all_in_creation_order(self, store):
        seed_record(store, "b", "Second", order=2)
        seed_record(store, "a", "First", order=1)
        seed_record(store, "c", "Third", order=3)

        assert [r.name for r in store.list_all()] == ["First", "Second", "Third"]

    def test_update_by_id_changes_descriptive_fields(self, store):
        seed_record(store, "u1", "Alice", scanned=True, scan_time=T0, scanned_times=2)

        updated = store.update_by_id("u1", {"name": "Alice Smith", "region": "R2"})

        assert updated.name == "Alice Smith"
        assert updated.region == "R2"
        assert updated.scanned is True
        assert updated.scanned_times == 2

    def test_update_by_id_rejects_checkin_fields(self, store):
        seed_record(store, "u1", "Alice")

        with pytest.raises(ValueError, match="not editable"):
            store.update_by_id("u1", {"scanned": False})

    def test_update_unknown_returns_none(self, store):
        assert store.update_by_id("missing", {"name": "X"}) is None

    def test_delete_by_id(self, store):
        seed_record(store, "u1", "Alice")

        assert store.delete_by_id("u1") is True
        assert store.find_by_id("u1") is None
        assert store.delete_by_id("u1") is False


@pytest.mark.unit
class TestSqlStoreFailures:
    """Database errors surface as StorageError and leave the session usable."""

    def test_read_failure_is_storage_error(self, sql_store):
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(sql_store.db, "execute", side_effect=error):
            with pytest.raises(StorageError, match="Failed to update user status"):
                sql_store.find_by_id("u1")

    def test_update_failure_is_storage_error(self, sql_store):
        seed_record(sql_store, "u1", "Alice")
        error = OperationalError("UPDATE", {}, Exception("canceling statement due to statement timeout"))

        with patch.object(sql_store.db, "execute", side_effect=error):
            with pytest.raises(StorageError):
                sql_store.conditional_update("u1", expected_scanned=False,
                                             new_fields={"scanned": True, "scan_time": T0})

        # Nothing was written and the session still works
        record = sql_store.find_by_id("u1")
        assert record.scanned is False
        assert record.scanned_times == 0

    def test_create_failure_message(self, sql_store):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch.object(sql_store.db, "commit", side_effect=error):
            with pytest.raises(StorageError, match="Failed to create users"):
                sql_store.create_many([{"name": "Alice"}])

        assert sql_store.list_all() == []

    def test_sql_store_is_record_store(self, db_session):
        from app.db.store import RecordStore

        assert isinstance(SqlRecordStore(db_session), RecordStore)
