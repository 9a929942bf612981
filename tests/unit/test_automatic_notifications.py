"""
Tests for refit/services/automatic_notifications.py
"""

from datetime import timedelta

import pytest

from refit.models import NotificationType, Priority
from refit.storage import StorageKeys


@pytest.fixture
def team_app(app, sample_team):
    for member in sample_team:
        app.team.create(member.model_dump())
    return app


def add_task(app, title, **extra):
    data = {"title": title, "project_id": "p1"}
    data.update(extra)
    return app.tasks.create(data)


class TestOverloadedMembers:
    """Tests for check_overloaded_members."""

    def test_flags_member_over_threshold(self, team_app, fixed_now):
        created = team_app.automatic_notifications.check_overloaded_members(fixed_now)

        assert len(created) == 1
        notification = created[0]
        assert notification.type == NotificationType.SYSTEM
        assert notification.priority == Priority.HIGH
        assert notification.metadata.user_id == "member-luca"
        assert "Luca Ferrari is at 94% utilisation (5 active tasks)" in notification.message

    def test_same_member_not_flagged_twice_within_a_day(self, team_app, fixed_now):
        notifier = team_app.automatic_notifications
        notifier.check_overloaded_members(fixed_now)

        assert notifier.check_overloaded_members(fixed_now + timedelta(hours=23)) == []
        assert len(notifier.check_overloaded_members(fixed_now + timedelta(hours=25))) == 1

    def test_check_time_recorded(self, team_app, storage, fixed_now):
        team_app.automatic_notifications.check_overloaded_members(fixed_now)

        checks = storage.get_value(StorageKeys.NOTIFICATION_CHECKS)
        assert checks == {"overload_member-luca": "2024-06-15T10:00:00+00:00"}

    def test_nobody_overloaded(self, app, member_factory, fixed_now):
        app.team.create(member_factory("m1", "Ada", workload={"utilization_rate": 90}).model_dump())
        assert app.automatic_notifications.check_overloaded_members(fixed_now) == []


class TestDeadlines:
    """Tests for check_approaching_deadlines."""

    def test_due_tomorrow_is_urgent(self, app, fixed_now):
        task = add_task(app, "Wire panel", status="in_progress", due_date="2024-06-16")

        created = app.automatic_notifications.check_approaching_deadlines(fixed_now)

        assert len(created) == 1
        assert created[0].type == NotificationType.DEADLINE_APPROACHING
        assert created[0].priority == Priority.URGENT
        assert created[0].message == 'Task "Wire panel" is due tomorrow'
        assert created[0].action_url == f"/tasks/{task.id}"
        assert created[0].metadata.task_id == task.id

    def test_due_in_a_few_days_is_high(self, app, fixed_now):
        add_task(app, "Order tiles", due_date="2024-06-18")

        created = app.automatic_notifications.check_approaching_deadlines(fixed_now)

        assert created[0].priority == Priority.HIGH
        assert created[0].message == 'Task "Order tiles" is due in 3 days'

    def test_beyond_warning_window_is_quiet(self, app, fixed_now):
        add_task(app, "Later", due_date="2024-06-19")
        assert app.automatic_notifications.check_approaching_deadlines(fixed_now) == []

    def test_overdue(self, app, fixed_now):
        add_task(app, "Late", status="in_progress", due_date="2024-06-14")

        created = app.automatic_notifications.check_approaching_deadlines(fixed_now)

        assert len(created) == 1
        assert created[0].type == NotificationType.TASK_OVERDUE
        assert created[0].priority == Priority.URGENT
        assert created[0].message.endswith("days overdue")

    def test_only_open_tasks_checked(self, app, fixed_now):
        add_task(app, "Done", status="completed", due_date="2024-06-10")
        add_task(app, "Parked", status="on_hold", due_date="2024-06-16")
        add_task(app, "No date")

        assert app.automatic_notifications.check_approaching_deadlines(fixed_now) == []

    def test_deadline_dedupe_per_task(self, app, storage, fixed_now):
        first = add_task(app, "A", due_date="2024-06-16")
        notifier = app.automatic_notifications
        notifier.check_approaching_deadlines(fixed_now)

        second = add_task(app, "B", due_date="2024-06-17")
        created = notifier.check_approaching_deadlines(fixed_now + timedelta(hours=1))

        assert [n.metadata.task_id for n in created] == [second.id]
        assert f"deadline_{first.id}" in storage.get_value(StorageKeys.NOTIFICATION_CHECKS)


class TestUnassignedTasks:
    """Tests for check_unassigned_tasks."""

    def test_one_summary_for_high_priority_pending(self, app, fixed_now):
        add_task(app, "Urgent", priority="urgent")
        add_task(app, "High", priority="high")
        add_task(app, "Medium", priority="medium")
        add_task(app, "Taken", priority="high", assigned_to=["member-marco"])
        add_task(app, "Running", priority="high", status="in_progress")

        notification = app.automatic_notifications.check_unassigned_tasks(fixed_now)

        assert notification.message == "2 high priority tasks are waiting for an assignee"
        assert notification.type == NotificationType.SYSTEM

    def test_nothing_to_report(self, app, fixed_now):
        add_task(app, "Medium", priority="medium")
        assert app.automatic_notifications.check_unassigned_tasks(fixed_now) is None

    def test_summary_deduplicated(self, app, fixed_now):
        add_task(app, "High", priority="high")
        notifier = app.automatic_notifications
        notifier.check_unassigned_tasks(fixed_now)

        assert notifier.check_unassigned_tasks(fixed_now + timedelta(hours=2)) is None


class TestPreferencesAndRunAll:
    """Tests for suppression and run_all."""

    def test_suppressed_type_is_not_recorded(self, team_app, storage, fixed_now):
        team_app.notifications.update_preferences({"types": {"system": False}})

        assert team_app.automatic_notifications.check_overloaded_members(fixed_now) == []
        assert storage.get_value(StorageKeys.NOTIFICATION_CHECKS) is None

        team_app.notifications.update_preferences({"types": {"system": True}})
        assert len(team_app.automatic_notifications.check_overloaded_members(fixed_now)) == 1

    def test_quiet_hours_use_local_clock(self, team_app, fixed_now):
        # 10:00 UTC is 12:00 in Rome
        team_app.notifications.update_preferences({
            "quiet_hours": {"enabled": True, "start": "11:30", "end": "12:30"},
        })
        assert team_app.automatic_notifications.check_overloaded_members(fixed_now) == []

    def test_run_all(self, team_app, fixed_now):
        add_task(team_app, "Soon", due_date="2024-06-16")
        add_task(team_app, "Unowned", priority="urgent")

        created = team_app.run_automatic_checks(fixed_now)

        assert {n.type for n in created} == {NotificationType.SYSTEM, NotificationType.DEADLINE_APPROACHING}
        assert len(created) == 3
        assert team_app.notifications.unread_count() == 3
        assert team_app.run_automatic_checks(fixed_now) == []
