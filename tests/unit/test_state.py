"""
Tests for refit/state.py
"""

import pytest

from refit.models import User
from refit.state import AppState, AppView, PERSISTED_FIELDS
from refit.storage import StorageKeys


@pytest.fixture
def user():
    return User(id="user-1", first_name="Anna", last_name="Galli", email="anna@example.com", role="project_manager")


class TestActions:
    """Tests for the state actions."""

    def test_defaults(self):
        state = AppState()
        assert state.sidebar_open
        assert state.current_view == AppView.DASHBOARD
        assert not state.is_authenticated

    def test_toggles_and_view(self):
        state = AppState()
        state.toggle_sidebar()
        state.toggle_dark_mode()
        state.set_view("quotes")

        assert not state.sidebar_open
        assert state.dark_mode
        assert state.current_view == AppView.QUOTES

    def test_unknown_view_rejected(self):
        with pytest.raises(ValueError):
            AppState().set_view("nowhere")

    def test_login_and_logout_clear_selection(self, user):
        state = AppState()
        state.login(user)
        state.select_project("project-1")
        state.select_location("location-1")

        state.logout()

        assert state.current_user is None
        assert not state.is_authenticated
        assert state.selected_project_id is None
        assert state.selected_location_id is None

    def test_set_current_user_tracks_authentication(self, user):
        state = AppState()
        state.set_current_user(user)
        assert state.is_authenticated
        state.set_current_user(None)
        assert not state.is_authenticated

    def test_filters_merge(self):
        state = AppState()
        state.set_project_filters(status="in_progress")
        state.set_project_filters(priority="high")

        assert state.filters.projects.status == "in_progress"
        assert state.filters.projects.priority == "high"

        state.clear_filters()
        assert state.filters.projects.status is None

    def test_search(self):
        state = AppState()
        state.set_search_query("duomo")
        state.set_search_results([{"id": "p1"}])
        state.clear_search()

        assert state.search_query == ""
        assert state.search_results == []

    def test_reset(self, user):
        state = AppState()
        state.login(user)
        state.toggle_dark_mode()
        state.set_contractor_filters(status="active")

        state.reset()

        assert state == AppState()


class TestPersistence:
    """Tests for save_state and load_state."""

    def test_only_allow_listed_fields_written(self, storage, user):
        state = AppState()
        state.login(user)
        state.set_view("tasks")
        state.select_project("project-1")

        assert state.save_state(storage)

        stored = storage.get_value(StorageKeys.APP_STORE)
        assert set(stored) == {"sidebarOpen", "darkMode", "currentUser", "isAuthenticated"}
        assert stored["currentUser"]["firstName"] == "Anna"

    def test_round_trip_restores_persisted_fields_only(self, storage, user):
        state = AppState()
        state.login(user)
        state.toggle_sidebar()
        state.set_view("tasks")
        state.save_state(storage)

        restored = AppState.load_state(storage)

        assert restored.current_user.email == "anna@example.com"
        assert restored.is_authenticated
        assert not restored.sidebar_open
        assert restored.current_view == AppView.DASHBOARD

    def test_extra_stored_keys_ignored(self, storage):
        storage.set_value(StorageKeys.APP_STORE, {"darkMode": True, "selectedProjectId": "p9"})

        restored = AppState.load_state(storage)

        assert restored.dark_mode
        assert restored.selected_project_id is None

    def test_unreadable_state_gives_defaults(self, storage):
        storage.set_value(StorageKeys.APP_STORE, {"currentUser": {"id": 5}})
        assert AppState.load_state(storage) == AppState()

    def test_nothing_stored(self, storage):
        assert AppState.load_state(storage) == AppState()

    def test_uses_global_storage_by_default(self, isolated_storage):
        state = AppState()
        state.toggle_dark_mode()
        state.save_state()

        assert isolated_storage.get_value(StorageKeys.APP_STORE)["darkMode"] is True
        assert AppState.load_state().dark_mode

    def test_persisted_field_names(self):
        assert PERSISTED_FIELDS == ("sidebar_open", "dark_mode", "current_user", "is_authenticated")
