"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime

import pytest
import pytz

from config import settings
from refit.app import RefitApp
from refit.models import TeamMember
from refit.storage import MemoryBackend, StorageAdapter, set_storage


@pytest.fixture
def storage():
    """In-memory storage adapter with the default prefix and quota."""
    return StorageAdapter(MemoryBackend(), key_prefix="refit_", quota_bytes=5 * 1024 * 1024)


@pytest.fixture(autouse=True)
def isolated_storage(storage):
    """Point the global adapter at the per-test memory store."""
    set_storage(storage)
    yield storage
    set_storage(None)


@pytest.fixture
def development_mode(monkeypatch):
    """Enable development-only operations such as the data reset."""
    monkeypatch.setattr(settings, "environment", "development")


@pytest.fixture
def fixed_now():
    """Saturday 15 June 2024, 10:00 UTC (12:00 in Rome)."""
    return datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)


@pytest.fixture
def app(storage):
    return RefitApp(storage)


def make_member(member_id, name, **overrides):
    """TeamMember with sensible defaults; nested dicts override whole sub-objects."""
    data = {
        "id": member_id,
        "name": name,
        "email": f"{member_id}@example.com",
        "role": "technician",
        "skills": [],
        "availability": {"hours_per_week": 40},
        "workload": {"current_tasks": 0, "total_hours": 0, "utilization_rate": 0},
        "performance": {"tasks_completed": 0, "on_time_completion": 0, "average_rating": 0},
    }
    data.update(overrides)
    return TeamMember.model_validate(data)


@pytest.fixture
def sample_team():
    """Four members with different skills and load."""
    return [
        make_member(
            "member-marco", "Marco Bianchi",
            role="manager",
            skills=["planning", "budgeting"],
            workload={"current_tasks": 3, "total_hours": 20, "utilization_rate": 50},
            performance={"tasks_completed": 12, "on_time_completion": 90, "average_rating": 4.5},
        ),
        make_member(
            "member-giulia", "Giulia Rossi",
            role="coordinator",
            skills=["electrical", "safety"],
            workload={"current_tasks": 1, "total_hours": 8, "utilization_rate": 20},
            performance={"tasks_completed": 5, "on_time_completion": 80, "average_rating": 4.0},
        ),
        make_member(
            "member-luca", "Luca Ferrari",
            skills=["plumbing", "hvac"],
            availability={"hours_per_week": 36},
            workload={"current_tasks": 5, "total_hours": 34, "utilization_rate": 94},
            performance={"tasks_completed": 20, "on_time_completion": 70, "average_rating": 3.8},
        ),
        make_member(
            "member-sara", "Sara Conti",
            skills=["flooring", "lighting"],
            availability={"hours_per_week": 30},
        ),
    ]


@pytest.fixture
def member_factory():
    return make_member
