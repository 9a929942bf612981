"""
Location repository.

Locations are the stores, offices and sites that host projects.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..models import Location, LocationStatus, LocationType
from ..storage import StorageAdapter, StorageKeys
from ..utils.validation import ValidationResult, validate_location_data

logger = logging.getLogger(__name__)


class LocationRepository(BaseRepository[Location]):
    """Repository for location operations."""

    storage_key = StorageKeys.LOCATIONS
    model = Location
    id_prefix = "location"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_location_data(data)

    def get_by_status(self, status: LocationStatus) -> List[Location]:
        status = LocationStatus(status)
        return self.filter_by(lambda loc: loc.status == status)

    def get_by_type(self, location_type: LocationType) -> List[Location]:
        location_type = LocationType(location_type)
        return self.filter_by(lambda loc: loc.type == location_type)

    def get_by_code(self, code: str) -> Optional[Location]:
        for location in self._load():
            if location.code.lower() == code.lower():
                return location
        return None

    def search(self, query: str) -> List[Location]:
        """Case-insensitive match on name, code or city."""
        if not query:
            return self._load()

        q = query.lower()
        results = [
            loc for loc in self._load()
            if q in loc.name.lower() or q in loc.code.lower() or q in loc.address.city.lower()
        ]
        logger.debug(f"Location search '{query}': {len(results)} results")
        return results


# Singleton
_location_repository: Optional[LocationRepository] = None


def get_location_repository(storage: Optional[StorageAdapter] = None) -> LocationRepository:
    """Get the location repository singleton."""
    global _location_repository
    if _location_repository is None:
        _location_repository = LocationRepository(storage)
    return _location_repository
