"""
Tests for refit/storage/adapter.py

Covers array CRUD, single values, quota handling, usage info, data
validation, snapshot export/import and the development-only reset.
"""

import json
import re

import pytest

from refit.exceptions import DataResetNotAllowedError
from refit.storage import MemoryBackend, StorageAdapter, StorageKeys, generate_id


class TestArrayOperations:
    """Tests for get/set/add/update/delete on array keys."""

    def test_get_missing_key_returns_empty_list(self, storage):
        """Test that an absent key reads as []."""
        assert storage.get(StorageKeys.PROJECTS) == []

    def test_add_and_find_by_id(self, storage):
        """Test that added records can be found by id."""
        assert storage.add(StorageKeys.PROJECTS, {"id": "p1", "name": "Milano"})
        assert storage.find_by_id(StorageKeys.PROJECTS, "p1") == {"id": "p1", "name": "Milano"}
        assert storage.find_by_id(StorageKeys.PROJECTS, "p2") is None

    def test_keys_are_prefixed(self, storage):
        """Test that values live under the prefixed key."""
        storage.set(StorageKeys.LOCATIONS, [{"id": "l1"}])
        assert storage.backend.get_item("refit_locations") == '[{"id": "l1"}]'

    def test_update_merges_and_stamps_updated_at(self, storage):
        """Test shallow merge plus updatedAt stamp."""
        storage.set(StorageKeys.TASKS, [{"id": "t1", "title": "Old", "status": "pending"}])

        assert storage.update(StorageKeys.TASKS, "t1", {"title": "New"})

        record = storage.find_by_id(StorageKeys.TASKS, "t1")
        assert record["title"] == "New"
        assert record["status"] == "pending"
        assert "updatedAt" in record

    def test_update_missing_id_returns_false(self, storage):
        """Test that updating an unknown id changes nothing."""
        storage.set(StorageKeys.TASKS, [{"id": "t1"}])
        assert storage.update(StorageKeys.TASKS, "nope", {"title": "x"}) is False
        assert storage.get(StorageKeys.TASKS) == [{"id": "t1"}]

    def test_delete_removes_record(self, storage):
        storage.set(StorageKeys.TASKS, [{"id": "t1"}, {"id": "t2"}])
        assert storage.delete(StorageKeys.TASKS, "t1")
        assert storage.get(StorageKeys.TASKS) == [{"id": "t2"}]

    def test_clear_removes_key(self, storage):
        storage.set(StorageKeys.TASKS, [{"id": "t1"}])
        assert storage.clear(StorageKeys.TASKS)
        assert storage.backend.get_item("refit_tasks_enhanced") is None

    def test_corrupt_json_reads_as_empty(self, storage):
        """Test that unparseable data is logged and read as []."""
        storage.backend.set_item("refit_projects", "{not json")
        assert storage.get(StorageKeys.PROJECTS) == []

    def test_non_array_reads_as_empty(self, storage):
        storage.backend.set_item("refit_projects", '{"id": "p1"}')
        assert storage.get(StorageKeys.PROJECTS) == []


class TestSingleValues:
    """Tests for get_value/set_value."""

    def test_roundtrip_object(self, storage):
        assert storage.set_value(StorageKeys.APP_STORE, {"darkMode": True})
        assert storage.get_value(StorageKeys.APP_STORE) == {"darkMode": True}

    def test_missing_value_returns_default(self, storage):
        assert storage.get_value(StorageKeys.APP_STORE) is None
        assert storage.get_value(StorageKeys.APP_STORE, {}) == {}

    def test_unserializable_value_returns_false(self, storage):
        """Test that a value json cannot encode is reported, not raised."""
        assert storage.set_value(StorageKeys.APP_STORE, {"bad": object()}) is False


class TestQuota:
    """Tests for the storage quota check."""

    def test_write_over_quota_fails_and_keeps_old_value(self):
        """Test that an over-quota write returns False and leaves data intact."""
        adapter = StorageAdapter(MemoryBackend(), key_prefix="refit_", quota_bytes=60)
        assert adapter.set(StorageKeys.PHOTOS, [{"id": "a"}])

        big = [{"id": str(i), "text": "x" * 20} for i in range(5)]
        assert adapter.set(StorageKeys.PHOTOS, big) is False
        assert adapter.get(StorageKeys.PHOTOS) == [{"id": "a"}]

    def test_zero_quota_disables_check(self):
        adapter = StorageAdapter(MemoryBackend(), key_prefix="refit_", quota_bytes=0)
        assert adapter.set(StorageKeys.PHOTOS, [{"text": "x" * 10000}])

    def test_storage_info_sorted_by_size(self, storage):
        """Test usage totals and the per-key ranking."""
        storage.set(StorageKeys.PROJECTS, [{"id": "p1", "name": "x" * 100}])
        storage.set(StorageKeys.TASKS, [{"id": "t1"}])

        info = storage.get_storage_info()

        assert info.total == 5 * 1024 * 1024
        assert info.used == sum(size for _, size in info.keys)
        assert info.keys[0][0] == "refit_projects"
        assert 0 < info.percentage < 1


class TestValidateData:
    """Tests for validate_data."""

    def test_clean_store_is_valid(self, storage):
        storage.set(StorageKeys.PROJECTS, [])
        result = storage.validate_data()
        assert result.is_valid
        assert result.errors == []

    def test_non_array_key_is_an_error(self, storage):
        storage.backend.set_item("refit_projects", '{"oops": 1}')
        result = storage.validate_data()
        assert not result.is_valid
        assert any("refit_projects" in e for e in result.errors)

    def test_invalid_json_is_an_error(self, storage):
        storage.backend.set_item("refit_tasks_enhanced", "[")
        result = storage.validate_data()
        assert "refit_tasks_enhanced: Invalid JSON data" in result.errors

    def test_high_usage_warns(self):
        adapter = StorageAdapter(MemoryBackend(), key_prefix="refit_", quota_bytes=100)
        adapter.backend.set_item("refit_photos", "[" + " " * 95 + "]")
        result = adapter.validate_data()
        assert result.is_valid
        assert result.warnings


class TestSnapshot:
    """Tests for export_data/import_data."""

    def test_export_shape(self, storage):
        storage.set(StorageKeys.PROJECTS, [{"id": "p1"}])

        snapshot = json.loads(storage.export_data())

        assert snapshot["version"] == "1.0"
        assert "exportDate" in snapshot
        assert snapshot["data"]["refit_projects"] == [{"id": "p1"}]
        assert snapshot["data"]["refit_tasks_enhanced"] == []

    def test_export_then_import_restores_data(self, storage):
        """Test that a snapshot restores a fresh store."""
        storage.set(StorageKeys.PROJECTS, [{"id": "p1"}])
        storage.set_value(StorageKeys.APP_STORE, {"darkMode": True})
        text = storage.export_data()

        fresh = StorageAdapter(MemoryBackend(), key_prefix="refit_")
        assert fresh.import_data(text)
        assert fresh.get(StorageKeys.PROJECTS) == [{"id": "p1"}]
        assert fresh.get_value(StorageKeys.APP_STORE) == {"darkMode": True}

    def test_import_overwrites_and_ignores_unknown_keys(self, storage):
        storage.set(StorageKeys.PROJECTS, [{"id": "old"}])
        text = json.dumps({"data": {"refit_projects": [{"id": "new"}], "refit_mystery": [1]}})

        assert storage.import_data(text)

        assert storage.get(StorageKeys.PROJECTS) == [{"id": "new"}]
        assert storage.backend.get_item("refit_mystery") is None

    def test_import_malformed_json_returns_false(self, storage):
        storage.set(StorageKeys.PROJECTS, [{"id": "keep"}])
        assert storage.import_data("{not json") is False
        assert storage.get(StorageKeys.PROJECTS) == [{"id": "keep"}]

    def test_import_without_data_member_returns_false(self, storage):
        assert storage.import_data(json.dumps({"version": "1.0"})) is False


class TestReset:
    """Tests for reset_all_data."""

    def test_reset_refused_outside_development(self, storage):
        storage.set(StorageKeys.PROJECTS, [{"id": "p1"}])
        with pytest.raises(DataResetNotAllowedError):
            storage.reset_all_data()
        assert storage.get(StorageKeys.PROJECTS) == [{"id": "p1"}]

    def test_reset_clears_every_key(self, storage, development_mode):
        storage.set(StorageKeys.PROJECTS, [{"id": "p1"}])
        storage.set_value(StorageKeys.APP_STORE, {"darkMode": True})

        assert storage.reset_all_data()

        assert storage.backend.keys("refit_") == []


class TestGenerateId:
    """Tests for generate_id."""

    def test_format_with_prefix(self):
        assert re.fullmatch(r"task-\d{13}-[0-9a-z]{9}", generate_id("task"))

    def test_format_without_prefix(self):
        assert re.fullmatch(r"\d{13}-[0-9a-z]{9}", generate_id())

    def test_ids_are_unique(self):
        ids = {generate_id("x") for _ in range(200)}
        assert len(ids) == 200
