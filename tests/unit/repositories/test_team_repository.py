"""
Unit tests for TeamRepository.

Covers member CRUD, duplicate email protection, workload bookkeeping and
performance stats.
"""

import pytest

from refit.exceptions import DuplicateEntityError, EntityValidationError
from refit.repositories import TeamRepository
from refit.repositories.team import utilization_rate


@pytest.fixture
def repo(storage):
    return TeamRepository(storage)


@pytest.fixture
def team(repo, sample_team):
    for member in sample_team:
        repo.create(member.model_dump())
    return repo


class TestCreate:
    """Tests for member creation."""

    def test_create(self, repo):
        member = repo.create({"name": "Anna Galli", "email": "anna@example.com", "skills": ["painting"]})

        assert member.id.startswith("member-")
        assert member.availability.hours_per_week == 40
        assert member.is_active

    def test_duplicate_email_case_insensitive(self, repo):
        repo.create({"name": "Anna Galli", "email": "anna@example.com"})

        with pytest.raises(DuplicateEntityError):
            repo.create({"name": "Anna G.", "email": "  ANNA@example.com "})
        assert repo.count() == 1

    def test_invalid_email(self, repo):
        with pytest.raises(EntityValidationError) as exc_info:
            repo.create({"name": "Anna Galli", "email": "not-an-email"})
        assert "email" in exc_info.value.field_errors


class TestQueries:
    """Tests for member queries."""

    def test_get_by_email_and_name(self, team):
        assert team.get_by_email("SARA-member@example.com") is None
        assert team.get_by_email("MEMBER-SARA@example.com").name == "Sara Conti"
        assert team.get_by_name("Luca Ferrari").id == "member-luca"

    def test_by_skill_substring(self, team):
        assert [m.id for m in team.get_by_skill("plumb")] == ["member-luca"]

    def test_available_members_least_utilised_first(self, team):
        members = team.get_available_members()
        assert [m.id for m in members] == ["member-sara", "member-giulia", "member-marco", "member-luca"]

    def test_available_members_with_skills(self, team):
        members = team.get_available_members(["electrical", "hvac"])
        assert [m.id for m in members] == ["member-giulia", "member-luca"]

    def test_inactive_members_not_available(self, team):
        team.update("member-sara", {"status": "vacation"})
        assert "member-sara" not in [m.id for m in team.get_available_members()]

    def test_search(self, team):
        assert [m.id for m in team.search("lighting")] == ["member-sara"]
        assert len(team.search(" ")) == 4

    def test_filter_members(self, team):
        members = team.filter_members(min_utilization=20, max_utilization=60)
        assert sorted(m.id for m in members) == ["member-giulia", "member-marco"]

        assert [m.id for m in team.filter_members(role="manager")] == ["member-marco"]


class TestWorkload:
    """Tests for workload bookkeeping."""

    def test_utilization_rate(self):
        assert utilization_rate(20, 40) == 50
        assert utilization_rate(34, 36) == 94
        assert utilization_rate(80, 40) == 100
        assert utilization_rate(5, 0) == 100
        assert utilization_rate(0, 0) == 0

    def test_update_workload(self, team):
        member = team.update_workload("member-sara", 2, 12)

        assert member.workload.current_tasks == 2
        assert member.workload.total_hours == 12
        assert member.workload.utilization_rate == 40

    def test_update_workload_never_negative(self, team):
        member = team.update_workload("member-giulia", -3, -20)

        assert member.workload.current_tasks == 0
        assert member.workload.total_hours == 0
        assert member.workload.utilization_rate == 0

    def test_update_workload_unknown(self, team):
        assert team.update_workload("member-missing", 1, 1) is None

    def test_team_workload(self, team):
        workload = team.get_team_workload()

        assert workload.total == 62
        assert workload.average == 16
        assert [m.id for m in workload.overloaded] == ["member-luca"]
        assert [m.id for m in workload.underutilized] == ["member-giulia", "member-sara"]

    def test_exactly_at_threshold_is_not_overloaded(self, team):
        team.update("member-sara", {"workload": {"current_tasks": 4, "total_hours": 27, "utilization_rate": 90}})
        assert [m.id for m in team.get_team_workload().overloaded] == ["member-luca"]


class TestPerformance:
    """Tests for performance stats."""

    def test_update_performance_on_time(self, team):
        member = team.update_performance("member-marco", task_completed=True, on_time=True)

        assert member.performance.tasks_completed == 13
        assert member.performance.on_time_completion == 92

    def test_update_performance_late(self, team):
        member = team.update_performance("member-giulia", task_completed=True, on_time=False)

        assert member.performance.tasks_completed == 6
        assert member.performance.on_time_completion == 67

    def test_first_completion(self, team):
        member = team.update_performance("member-sara", task_completed=True, on_time=True)
        assert member.performance.on_time_completion == 100

    def test_top_performers(self, team):
        top = team.get_top_performers(limit=2)
        assert [m.id for m in top] == ["member-marco", "member-giulia"]
