"""Appointment data model."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import DateOnly, Priority, RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class AppointmentType(str, Enum):
    MEETING = "meeting"
    SITE_VISIT = "site_visit"
    CLIENT_CALL = "client_call"
    INSPECTION = "inspection"
    DEADLINE = "deadline"
    MILESTONE = "milestone"
    CONTRACTOR_MEETING = "contractor_meeting"
    INTERNAL_REVIEW = "internal_review"
    OTHER = "other"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"  # not yet confirmed
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


CLOSED_APPOINTMENT_STATUSES = (AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED)


class AppointmentLocation(RefitModel):
    type: str = "physical"  # physical, virtual
    address: Optional[str] = None
    location_id: Optional[str] = None
    meeting_link: Optional[str] = None


class Participant(RefitModel):
    type: str = "internal"  # internal, external
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    required: bool = True
    confirmed: Optional[bool] = None


class AppointmentReminder(RefitModel):
    enabled: bool = False
    minutes_before: int = 60


class Appointment(RefitModel):
    """A dated meeting, visit or milestone; times are local HH:MM strings."""

    id: str
    project_id: Optional[str] = None
    phase_id: Optional[str] = None
    location_id: Optional[str] = None
    title: str
    description: str = ""
    type: AppointmentType = AppointmentType.MEETING
    scheduled_date: DateOnly
    start_time: str
    end_time: str
    location: Optional[AppointmentLocation] = None
    participants: List[Participant] = Field(default_factory=list)
    organizer: str = ""
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    priority: Priority = Priority.MEDIUM
    reminder: Optional[AppointmentReminder] = None
    agenda: Optional[str] = None
    notes: Optional[str] = None
    outcomes: Optional[str] = None
    cancelled_at: Optional[UtcDatetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    created_by: str = ""
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    @property
    def sort_key(self):
        return (self.scheduled_date, self.start_time)

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_APPOINTMENT_STATUSES
