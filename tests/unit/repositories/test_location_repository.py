"""
Unit tests for LocationRepository and the shared BaseRepository behaviour.
"""

import pytest

from refit.exceptions import EntityNotFoundError, EntityValidationError
from refit.models import LocationStatus
from refit.repositories import LocationRepository
from refit.storage import StorageKeys


@pytest.fixture
def repo(storage):
    return LocationRepository(storage)


def location_data(**extra):
    data = {"name": "Milano Duomo", "code": "MI-001", "address": {"city": "Milano"}}
    data.update(extra)
    return data


class TestCreate:
    """Tests for create."""

    def test_assigns_prefixed_id(self, repo):
        location = repo.create(location_data())

        assert location.id.startswith("location-")
        assert repo.get(location.id).name == "Milano Duomo"

    def test_keeps_given_id(self, repo):
        assert repo.create(location_data(id="loc-fixed")).id == "loc-fixed"

    def test_missing_fields_raise_before_write(self, repo, storage):
        with pytest.raises(EntityValidationError) as exc_info:
            repo.create({"name": "", "address": {}})

        assert set(exc_info.value.field_errors) == {"name", "code", "address.city"}
        assert storage.get(StorageKeys.LOCATIONS) == []

    def test_malformed_nested_field_reported_by_path(self, repo):
        with pytest.raises(EntityValidationError) as exc_info:
            repo.create(location_data(coordinates={"lat": "north"}))
        assert any(key.startswith("coordinates") for key in exc_info.value.field_errors)

    def test_stored_with_camel_case_keys(self, repo, storage):
        repo.create(location_data(operating_hours={"monday": {"open": "10:00"}}))
        raw = storage.get(StorageKeys.LOCATIONS)[0]
        assert "operatingHours" in raw
        assert "createdAt" in raw


class TestReadUpdateDelete:
    """Tests for get, update, delete and require."""

    def test_update_merges(self, repo):
        location = repo.create(location_data())

        updated = repo.update(location.id, {"status": LocationStatus.UNDER_RENOVATION, "manager": "Anna"})

        assert updated.status == LocationStatus.UNDER_RENOVATION
        assert updated.manager == "Anna"
        assert updated.code == "MI-001"

    def test_update_unknown_returns_none(self, repo):
        assert repo.update("location-missing", {"name": "x"}) is None

    def test_delete(self, repo):
        location = repo.create(location_data())
        assert repo.delete(location.id)
        assert repo.get(location.id) is None
        assert not repo.delete(location.id)

    def test_require(self, repo):
        with pytest.raises(EntityNotFoundError):
            repo.require("location-missing")

    def test_corrupt_records_skipped(self, repo, storage):
        repo.create(location_data())
        storage.add(StorageKeys.LOCATIONS, {"id": "broken", "surface": "big"})

        assert [loc.code for loc in repo.list_all()] == ["MI-001"]
        assert repo.get("broken") is None


class TestQueries:
    """Tests for the location queries."""

    def test_get_by_code_case_insensitive(self, repo):
        repo.create(location_data())
        assert repo.get_by_code("mi-001").name == "Milano Duomo"
        assert repo.get_by_code("RM-001") is None

    def test_search_name_code_city(self, repo):
        repo.create(location_data())
        repo.create(location_data(name="Roma Termini", code="RM-002", address={"city": "Roma"}))

        assert [loc.code for loc in repo.search("roma")] == ["RM-002"]
        assert [loc.code for loc in repo.search("mi-0")] == ["MI-001"]
        assert len(repo.search("")) == 2

    def test_get_by_status(self, repo):
        repo.create(location_data())
        repo.create(location_data(code="MI-002", status="closed"))
        assert [loc.code for loc in repo.get_by_status("closed")] == ["MI-002"]
