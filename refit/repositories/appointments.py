"""
Appointment repository.

Appointment dates and HH:MM times are local wall-clock values, so
"upcoming" and "today" are evaluated in the configured timezone.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..models import Appointment, AppointmentStatus, AppointmentType
from ..storage import StorageAdapter, StorageKeys
from ..utils.datetime_utils import get_local_now, utc_now
from ..utils.validation import ValidationResult, validate_appointment_data

logger = logging.getLogger(__name__)


def _sorted(appointments: List[Appointment]) -> List[Appointment]:
    return sorted(appointments, key=lambda a: a.sort_key)


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository for appointment operations."""

    storage_key = StorageKeys.APPOINTMENTS
    model = Appointment
    id_prefix = "appointment"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_appointment_data(data)

    # ==================== QUERIES ====================

    def get_by_project(self, project_id: str) -> List[Appointment]:
        return self.filter_by(lambda a: a.project_id == project_id)

    def get_by_phase(self, phase_id: str) -> List[Appointment]:
        return self.filter_by(lambda a: a.phase_id == phase_id)

    def get_by_location(self, location_id: str) -> List[Appointment]:
        return self.filter_by(lambda a: a.location_id == location_id)

    def get_by_date(self, day: date) -> List[Appointment]:
        return self.filter_by(lambda a: a.scheduled_date == day)

    def get_by_date_range(self, start: date, end: date) -> List[Appointment]:
        """Appointments between start and end inclusive, by date then start time."""
        return _sorted(self.filter_by(lambda a: start <= a.scheduled_date <= end))

    def get_by_type(self, appointment_type: AppointmentType) -> List[Appointment]:
        appointment_type = AppointmentType(appointment_type)
        return self.filter_by(lambda a: a.type == appointment_type)

    def get_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        status = AppointmentStatus(status)
        return self.filter_by(lambda a: a.status == status)

    def get_upcoming(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[Appointment]:
        """
        Open appointments from now on, soonest first.

        An appointment today counts while its start time has not passed.
        """
        local_now = get_local_now(now)
        today = local_now.date()
        clock = local_now.strftime("%H:%M")

        def is_upcoming(apt: Appointment) -> bool:
            if apt.is_closed:
                return False
            if apt.scheduled_date > today:
                return True
            return apt.scheduled_date == today and apt.start_time >= clock

        upcoming = _sorted(self.filter_by(is_upcoming))
        return upcoming[:limit] if limit else upcoming

    def get_today(self, now: Optional[datetime] = None) -> List[Appointment]:
        """Today's appointments except cancelled ones, by start time."""
        today = get_local_now(now).date()
        appointments = self.filter_by(
            lambda a: a.scheduled_date == today and a.status != AppointmentStatus.CANCELLED
        )
        return sorted(appointments, key=lambda a: a.start_time)

    # ==================== STATUS ====================

    def confirm(self, appointment_id: str) -> Optional[Appointment]:
        return self.update(appointment_id, {"status": AppointmentStatus.CONFIRMED})

    def cancel(self, appointment_id: str, reason: str = "", cancelled_by: Optional[str] = None) -> Optional[Appointment]:
        logger.info(f"Cancelling appointment {appointment_id}: {reason}")
        return self.update(appointment_id, {
            "status": AppointmentStatus.CANCELLED,
            "cancelled_at": utc_now(),
            "cancellation_reason": reason,
            "cancelled_by": cancelled_by,
        })

    def complete(self, appointment_id: str, outcomes: Optional[str] = None) -> Optional[Appointment]:
        return self.update(appointment_id, {
            "status": AppointmentStatus.COMPLETED,
            "outcomes": outcomes,
        })


# Singleton
_appointment_repository: Optional[AppointmentRepository] = None


def get_appointment_repository(storage: Optional[StorageAdapter] = None) -> AppointmentRepository:
    """Get the appointment repository singleton."""
    global _appointment_repository
    if _appointment_repository is None:
        _appointment_repository = AppointmentRepository(storage)
    return _appointment_repository
