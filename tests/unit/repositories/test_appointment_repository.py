"""
Unit tests for AppointmentRepository.

fixed_now is 10:00 UTC, which is 12:00 local time in Rome.
"""

from datetime import date, datetime

import pytest
import pytz

from refit.exceptions import EntityValidationError
from refit.models import AppointmentStatus
from refit.repositories import AppointmentRepository


@pytest.fixture
def repo(storage):
    return AppointmentRepository(storage)


def appointment(repo, title, day, start, end=None, **extra):
    data = {
        "title": title,
        "scheduled_date": day,
        "start_time": start,
        "end_time": end or f"{int(start[:2]) + 1:02d}:{start[3:]}",
        "project_id": "project-1",
    }
    data.update(extra)
    return repo.create(data)


class TestCreate:
    """Tests for appointment validation."""

    def test_create(self, repo):
        apt = appointment(repo, "Site visit", "2024-06-20", "09:00", type="site_visit")

        assert apt.id.startswith("appointment-")
        assert apt.scheduled_date == date(2024, 6, 20)
        assert apt.status == AppointmentStatus.SCHEDULED

    def test_missing_fields(self, repo):
        with pytest.raises(EntityValidationError) as exc_info:
            repo.create({"start_time": "9am"})
        assert set(exc_info.value.field_errors) == {"title", "scheduled_date", "start_time", "end_time"}

    def test_end_before_start(self, repo):
        with pytest.raises(EntityValidationError) as exc_info:
            appointment(repo, "Call", "2024-06-20", "10:00", "09:30")
        assert "end_time" in exc_info.value.field_errors


class TestUpcoming:
    """Tests for get_upcoming and get_today in local time."""

    def test_upcoming_uses_local_clock(self, repo, fixed_now):
        appointment(repo, "Morning", "2024-06-15", "11:30")
        appointment(repo, "Noon", "2024-06-15", "12:00")
        appointment(repo, "Afternoon", "2024-06-15", "15:00")
        appointment(repo, "Next week", "2024-06-22", "09:00")
        appointment(repo, "Yesterday", "2024-06-14", "16:00")

        titles = [a.title for a in repo.get_upcoming(now=fixed_now)]

        assert titles == ["Noon", "Afternoon", "Next week"]

    def test_upcoming_skips_closed_and_limits(self, repo, fixed_now):
        cancelled = appointment(repo, "Cancelled", "2024-06-16", "09:00")
        repo.cancel(cancelled.id, "Client unavailable")
        appointment(repo, "First", "2024-06-17", "09:00")
        appointment(repo, "Second", "2024-06-18", "09:00")

        assert [a.title for a in repo.get_upcoming(limit=1, now=fixed_now)] == ["First"]

    def test_local_date_rolls_over_before_utc(self, repo):
        # 22:30 UTC on the 15th is already the 16th in Rome
        late_evening = datetime(2024, 6, 15, 22, 30, tzinfo=pytz.UTC)
        appointment(repo, "Early", "2024-06-16", "08:00")
        appointment(repo, "Saturday", "2024-06-15", "18:00")

        assert [a.title for a in repo.get_today(late_evening)] == ["Early"]

    def test_today_sorted_and_excludes_cancelled(self, repo, fixed_now):
        appointment(repo, "Late", "2024-06-15", "17:00")
        appointment(repo, "Early", "2024-06-15", "08:00", status="completed")
        cancelled = appointment(repo, "Dropped", "2024-06-15", "10:00")
        repo.cancel(cancelled.id)

        assert [a.title for a in repo.get_today(fixed_now)] == ["Early", "Late"]


class TestStatus:
    """Tests for confirm, cancel and complete."""

    def test_cancel_records_reason(self, repo):
        apt = appointment(repo, "Meeting", "2024-06-20", "09:00")

        cancelled = repo.cancel(apt.id, "Moved", cancelled_by="member-marco")

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancellation_reason == "Moved"
        assert cancelled.cancelled_by == "member-marco"
        assert cancelled.cancelled_at is not None

    def test_confirm_and_complete(self, repo):
        apt = appointment(repo, "Inspection", "2024-06-20", "09:00")

        assert repo.confirm(apt.id).status == AppointmentStatus.CONFIRMED

        done = repo.complete(apt.id, "All checks passed")
        assert done.status == AppointmentStatus.COMPLETED
        assert done.outcomes == "All checks passed"

    def test_unknown_appointment(self, repo):
        assert repo.confirm("appointment-missing") is None


class TestQueries:
    """Tests for date queries."""

    def test_date_range_sorted(self, repo):
        appointment(repo, "B", "2024-06-21", "09:00")
        appointment(repo, "A2", "2024-06-20", "14:00")
        appointment(repo, "A1", "2024-06-20", "08:00")
        appointment(repo, "Out", "2024-06-25", "08:00")

        titles = [a.title for a in repo.get_by_date_range(date(2024, 6, 20), date(2024, 6, 21))]

        assert titles == ["A1", "A2", "B"]

    def test_by_type_and_project(self, repo):
        appointment(repo, "Visit", "2024-06-20", "09:00", type="site_visit")
        appointment(repo, "Call", "2024-06-20", "10:00", type="client_call", project_id="project-2")

        assert [a.title for a in repo.get_by_type("site_visit")] == ["Visit"]
        assert [a.title for a in repo.get_by_project("project-2")] == ["Call"]
