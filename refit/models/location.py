"""Location (store, office, site...) data model."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from .base import RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class LocationType(str, Enum):
    STORE = "store"
    OFFICE = "office"
    WAREHOUSE = "warehouse"
    FACTORY = "factory"
    CONSTRUCTION_SITE = "construction_site"
    HOTEL = "hotel"
    RESTAURANT = "restaurant"
    OTHER = "other"


class LocationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNDER_RENOVATION = "under_renovation"
    PLANNED = "planned"
    CLOSED = "closed"


class Address(RefitModel):
    """Postal address, shared with contractors."""
    street: str = ""
    city: str = ""
    province: str = ""
    cap: str = ""
    country: str = "Italia"

    def one_line(self) -> str:
        parts = [self.street, f"{self.cap} {self.city}".strip(), self.province]
        return ", ".join(p for p in parts if p)


class Coordinates(RefitModel):
    lat: float
    lng: float


class LocationContacts(RefitModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None


class OpeningHours(RefitModel):
    """Opening hours for one weekday, times as HH:MM."""
    open: str = "09:00"
    close: str = "19:00"
    closed: bool = False


class Location(RefitModel):
    """A physical site that hosts projects."""

    id: str
    name: str
    code: str = ""
    type: LocationType = LocationType.STORE
    subtype: Optional[str] = None  # flagship, outlet, headquarters, branch...
    address: Address = Field(default_factory=Address)
    coordinates: Optional[Coordinates] = None
    surface: float = 0.0  # square metres
    floors: Optional[int] = None
    status: LocationStatus = LocationStatus.ACTIVE
    manager: str = ""
    contacts: LocationContacts = Field(default_factory=LocationContacts)
    operating_hours: Dict[str, OpeningHours] = Field(default_factory=dict)  # keyed by weekday name
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    def is_open_on(self, weekday: str) -> bool:
        hours = self.operating_hours.get(weekday.lower())
        return hours is not None and not hours.closed
