"""Shared pydantic base and field types for stored entities."""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from ..utils.datetime_utils import ensure_utc


def _date_prefix(value: Any) -> Any:
    # Records written by older clients sometimes carry a full timestamp here
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
DateOnly = Annotated[date, BeforeValidator(_date_prefix)]


class Priority(str, Enum):
    """Priority levels shared by projects, tasks, appointments and notifications."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RefitModel(BaseModel):
    """
    Base for everything persisted in the key-value store.

    Python code uses snake_case attributes; stored JSON uses camelCase keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_storage(self) -> Dict[str, Any]:
        """Dump as a JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_storage(cls, data: Dict[str, Any]):
        return cls.model_validate(data)
