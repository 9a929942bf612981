"""
Tests for refit/storage/backends.py

The SQL backend runs on in-memory sqlite; the Redis backend is tested
against a mocked client.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
import redis

from refit.exceptions import StorageError, StorageSerializationError
from refit.storage import (
    JsonFileBackend,
    MemoryBackend,
    RedisBackend,
    SqlBackend,
    StorageAdapter,
    StorageKeys,
    create_backend,
)


class TestMemoryBackend:
    """Tests for MemoryBackend."""

    def test_set_get_remove(self):
        backend = MemoryBackend()
        backend.set_item("refit_a", "[]")
        assert backend.get_item("refit_a") == "[]"
        backend.remove_item("refit_a")
        assert backend.get_item("refit_a") is None

    def test_keys_filtered_by_prefix(self):
        backend = MemoryBackend({"refit_a": "1", "other_b": "2"})
        assert backend.keys("refit_") == ["refit_a"]

    def test_sizes(self):
        backend = MemoryBackend({"refit_a": "12345", "refit_b": "1"})
        assert backend.sizes("refit_") == {"refit_a": 5, "refit_b": 1}


class TestJsonFileBackend:
    """Tests for JsonFileBackend."""

    def test_values_persist_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileBackend(str(path)).set_item("refit_projects", '[{"id": "p1"}]')

        assert JsonFileBackend(str(path)).get_item("refit_projects") == '[{"id": "p1"}]'

    def test_missing_file_reads_empty(self, tmp_path):
        backend = JsonFileBackend(str(tmp_path / "nothing.json"))
        assert backend.get_item("refit_projects") is None
        assert backend.keys() == []

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        JsonFileBackend(str(path)).set_item("k", "v")
        assert path.exists()

    def test_corrupt_file_raises_serialization_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(StorageSerializationError):
            JsonFileBackend(str(path)).get_item("k")

    def test_adapter_over_corrupt_file_returns_empty(self, tmp_path):
        """Test that the adapter turns backend errors into []."""
        path = tmp_path / "store.json"
        path.write_text("[1, 2]", encoding="utf-8")
        adapter = StorageAdapter(JsonFileBackend(str(path)), key_prefix="refit_")
        assert adapter.get(StorageKeys.PROJECTS) == []


class TestSqlBackend:
    """Tests for SqlBackend on in-memory sqlite."""

    @pytest.fixture
    def backend(self):
        return SqlBackend("sqlite:///:memory:")

    def test_insert_then_update(self, backend):
        backend.set_item("refit_projects", "[]")
        backend.set_item("refit_projects", '[{"id": "p1"}]')
        assert backend.get_item("refit_projects") == '[{"id": "p1"}]'

    def test_missing_key_is_none(self, backend):
        assert backend.get_item("refit_nothing") is None

    def test_remove_and_keys(self, backend):
        backend.set_item("refit_a", "[]")
        backend.set_item("refit_b", "[]")
        backend.set_item("other_c", "[]")

        assert sorted(backend.keys("refit_")) == ["refit_a", "refit_b"]

        backend.remove_item("refit_a")
        assert backend.keys("refit_") == ["refit_b"]

    def test_prefix_underscore_is_literal(self, backend):
        """Test that '_' in the prefix is not a LIKE wildcard."""
        backend.set_item("refitXa", "[]")
        assert backend.keys("refit_") == []

    def test_adapter_roundtrip(self, backend):
        adapter = StorageAdapter(backend, key_prefix="refit_")
        adapter.add(StorageKeys.TASKS, {"id": "t1", "title": "Wire"})
        assert adapter.find_by_id(StorageKeys.TASKS, "t1")["title"] == "Wire"


class TestRedisBackend:
    """Tests for RedisBackend with a mocked client."""

    def test_get_and_set_delegate_to_client(self):
        client = Mock()
        client.get.return_value = "[]"
        backend = RedisBackend(client=client)

        backend.set_item("refit_a", "[1]")
        assert backend.get_item("refit_a") == "[]"

        client.set.assert_called_once_with("refit_a", "[1]")
        client.get.assert_called_once_with("refit_a")

    def test_keys_scan_with_prefix(self):
        client = Mock()
        client.scan_iter.return_value = iter(["refit_a", "refit_b"])
        backend = RedisBackend(client=client)

        assert backend.keys("refit_") == ["refit_a", "refit_b"]
        client.scan_iter.assert_called_once_with(match="refit_*")

    def test_redis_error_becomes_storage_error(self):
        client = Mock()
        client.get.side_effect = redis.ConnectionError("down")
        backend = RedisBackend(client=client)

        with pytest.raises(StorageError):
            backend.get_item("refit_a")

    def test_adapter_survives_redis_outage(self):
        """Test that a failed Redis write is reported as False."""
        client = Mock()
        client.scan_iter.return_value = iter([])
        client.set.side_effect = redis.ConnectionError("down")
        adapter = StorageAdapter(RedisBackend(client=client), key_prefix="refit_")

        assert adapter.set(StorageKeys.PROJECTS, []) is False


class TestCreateBackend:
    """Tests for create_backend."""

    def test_memory(self):
        backend = create_backend(SimpleNamespace(storage_backend="memory"))
        assert isinstance(backend, MemoryBackend)

    def test_json_uses_storage_path(self, tmp_path):
        path = str(tmp_path / "data.json")
        backend = create_backend(SimpleNamespace(storage_backend="JSON", storage_path=path))
        assert isinstance(backend, JsonFileBackend)
        assert str(backend.path) == path

    def test_sql(self):
        backend = create_backend(SimpleNamespace(storage_backend="sql", database_url="sqlite://"))
        assert isinstance(backend, SqlBackend)

    def test_unknown_backend_raises(self):
        with pytest.raises(ValueError):
            create_backend(SimpleNamespace(storage_backend="floppy"))
