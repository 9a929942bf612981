"""Application user (the person operating the dashboard)."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class UserRole(str, Enum):
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    SUPERVISOR = "supervisor"
    VIEWER = "viewer"


class Permission(RefitModel):
    resource: str  # projects, contractors, locations...
    actions: List[str] = Field(default_factory=list)  # create, read, update, delete


class User(RefitModel):
    id: str
    first_name: str
    last_name: str = ""
    email: str
    role: UserRole = UserRole.VIEWER
    permissions: List[Permission] = Field(default_factory=list)
    avatar: Optional[str] = None
    phone: Optional[str] = None
    department: str = ""
    is_active: bool = True
    last_login: Optional[UtcDatetime] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def can(self, resource: str, action: str) -> bool:
        if self.role == UserRole.ADMIN:
            return True
        return any(p.resource == resource and action in p.actions for p in self.permissions)
