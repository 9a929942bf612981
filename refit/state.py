"""
Application UI state.

Holds what the dashboard shows and who is using it: current view, sidebar
and theme flags, current user, selected entities, per-area filters and the
search box. Only the fields in PERSISTED_FIELDS survive a restart; they are
saved as one object under the ``app_store`` key.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .models import RefitModel, User
from .storage import StorageAdapter, StorageKeys, get_storage

logger = logging.getLogger(__name__)

PERSISTED_FIELDS = ("sidebar_open", "dark_mode", "current_user", "is_authenticated")


class AppView(str, Enum):
    DASHBOARD = "dashboard"
    LOCATIONS = "locations"
    PROJECTS = "projects"
    CONTRACTORS = "contractors"
    QUOTES = "quotes"
    CALENDAR = "calendar"
    APPOINTMENTS = "appointments"
    TASKS = "tasks"
    REPORTS = "reports"
    DOCUMENTS = "documents"
    PHOTOS = "photos"
    SETTINGS = "settings"


class ProjectFilters(RefitModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    location: Optional[str] = None


class ContractorFilters(RefitModel):
    status: Optional[str] = None
    specialization: Optional[str] = None


class QuoteFilters(RefitModel):
    status: Optional[str] = None
    project: Optional[str] = None


class Filters(RefitModel):
    projects: ProjectFilters = Field(default_factory=ProjectFilters)
    contractors: ContractorFilters = Field(default_factory=ContractorFilters)
    quotes: QuoteFilters = Field(default_factory=QuoteFilters)


class AppState(RefitModel):
    """Dashboard state with the actions that change it."""

    # UI
    sidebar_open: bool = True
    current_view: AppView = AppView.DASHBOARD
    dark_mode: bool = False

    # User
    current_user: Optional[User] = None
    is_authenticated: bool = False

    # Selection (entity ids)
    selected_location_id: Optional[str] = None
    selected_project_id: Optional[str] = None
    selected_contractor_id: Optional[str] = None

    filters: Filters = Field(default_factory=Filters)

    # Search
    search_query: str = ""
    search_results: List[Any] = Field(default_factory=list)

    # ==================== UI ====================

    def toggle_sidebar(self) -> None:
        self.sidebar_open = not self.sidebar_open

    def set_view(self, view: AppView) -> None:
        self.current_view = AppView(view)

    def toggle_dark_mode(self) -> None:
        self.dark_mode = not self.dark_mode

    # ==================== USER ====================

    def set_current_user(self, user: Optional[User]) -> None:
        self.current_user = user
        self.is_authenticated = user is not None

    def login(self, user: User) -> None:
        self.current_user = user
        self.is_authenticated = True
        logger.info(f"User {user.email} logged in")

    def logout(self) -> None:
        """Forget the user and every selection."""
        self.current_user = None
        self.is_authenticated = False
        self.selected_location_id = None
        self.selected_project_id = None
        self.selected_contractor_id = None

    # ==================== SELECTION ====================

    def select_location(self, location_id: Optional[str]) -> None:
        self.selected_location_id = location_id

    def select_project(self, project_id: Optional[str]) -> None:
        self.selected_project_id = project_id

    def select_contractor(self, contractor_id: Optional[str]) -> None:
        self.selected_contractor_id = contractor_id

    # ==================== FILTERS ====================

    def set_project_filters(self, **updates: Optional[str]) -> None:
        """Merge into the current project filters."""
        self.filters.projects = self.filters.projects.model_copy(update=updates)

    def set_contractor_filters(self, **updates: Optional[str]) -> None:
        self.filters.contractors = self.filters.contractors.model_copy(update=updates)

    def set_quote_filters(self, **updates: Optional[str]) -> None:
        self.filters.quotes = self.filters.quotes.model_copy(update=updates)

    def clear_filters(self) -> None:
        self.filters = Filters()

    # ==================== SEARCH ====================

    def set_search_query(self, query: str) -> None:
        self.search_query = query

    def set_search_results(self, results: List[Any]) -> None:
        self.search_results = list(results)

    def clear_search(self) -> None:
        self.search_query = ""
        self.search_results = []

    def reset(self) -> None:
        """Back to the initial state, persisted fields included."""
        initial = AppState()
        for name in type(self).model_fields:
            setattr(self, name, getattr(initial, name))

    # ==================== PERSISTENCE ====================

    def persisted(self) -> Dict[str, Any]:
        """The allow-listed fields, as stored."""
        return self.model_dump(by_alias=True, mode="json", include=set(PERSISTED_FIELDS))

    def save_state(self, storage: Optional[StorageAdapter] = None) -> bool:
        storage = storage if storage is not None else get_storage()
        return storage.set_value(StorageKeys.APP_STORE, self.persisted())

    @classmethod
    def load_state(cls, storage: Optional[StorageAdapter] = None) -> "AppState":
        """Initial state with the persisted fields restored; unreadable data is ignored."""
        storage = storage if storage is not None else get_storage()
        stored = storage.get_value(StorageKeys.APP_STORE)
        if not isinstance(stored, dict):
            return cls()

        try:
            restored = cls.model_validate(stored)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable app state: {e}")
            return cls()

        state = cls()
        for name in PERSISTED_FIELDS:
            setattr(state, name, getattr(restored, name))
        return state
