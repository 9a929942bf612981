"""
Project repository.

Projects own their phases inline, so phase operations rewrite the parent
project. Budgets are stored as given: `remaining` is never recomputed from
`approved - spent`.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..models import (
    ACTIVE_PROJECT_STATUSES,
    PhaseStatus,
    Priority,
    Project,
    ProjectPhase,
    ProjectStatus,
)
from ..storage import StorageAdapter, StorageKeys, generate_id
from ..utils.datetime_utils import utc_now
from ..utils.validation import ValidationResult, validate_project_data

logger = logging.getLogger(__name__)


class ProjectRepository(BaseRepository[Project]):
    """Repository for projects and their phases."""

    storage_key = StorageKeys.PROJECTS
    model = Project
    id_prefix = "project"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_project_data(data)

    def _touch(self, project: Project) -> Project:
        dates = project.dates.model_copy(update={"updated_at": utc_now()})
        return project.model_copy(update={"dates": dates})

    # ==================== QUERIES ====================

    def get_by_location(self, location_id: str) -> List[Project]:
        return self.filter_by(lambda p: p.location_id == location_id)

    def get_by_status(self, status: ProjectStatus) -> List[Project]:
        status = ProjectStatus(status)
        return self.filter_by(lambda p: p.status == status)

    def get_by_priority(self, priority: Priority) -> List[Project]:
        priority = Priority(priority)
        return self.filter_by(lambda p: p.priority == priority)

    def get_active(self) -> List[Project]:
        """Approved or in-progress projects."""
        return self.filter_by(lambda p: p.status in ACTIVE_PROJECT_STATUSES)

    @staticmethod
    def budget_remaining_expected(project: Project) -> float:
        """What `remaining` should be; callers decide whether to write it."""
        return project.budget.expected_remaining

    # ==================== PHASES ====================

    def get_phases(self, project_id: str) -> List[ProjectPhase]:
        """Phases ordered by their `order` index."""
        project = self.get(project_id)
        if project is None:
            return []
        return project.ordered_phases()

    def get_phase(self, project_id: str, phase_id: str) -> Optional[ProjectPhase]:
        project = self.get(project_id)
        return project.get_phase(phase_id) if project else None

    def add_phase(self, project_id: str, data: Dict[str, Any]) -> Optional[ProjectPhase]:
        """Append a phase; order defaults to the end of the list."""
        project = self.get(project_id)
        if project is None:
            logger.warning(f"Cannot add phase, project {project_id} not found")
            return None

        record = dict(data)
        record.setdefault("id", generate_id("phase"))
        record.setdefault("order", len(project.phases))
        record["project_id"] = project_id
        phase = ProjectPhase.model_validate(record)

        updated = self._touch(project.model_copy(update={"phases": project.phases + [phase]}))
        if not self._store(updated):
            return None

        logger.info(f"Added phase '{phase.name}' to project {project_id}")
        return phase

    def update_phase(self, project_id: str, phase_id: str, updates: Dict[str, Any]) -> Optional[ProjectPhase]:
        project = self.get(project_id)
        if project is None or project.get_phase(phase_id) is None:
            return None

        phases = []
        result = None
        for phase in project.phases:
            if phase.id == phase_id:
                merged = phase.model_dump()
                merged.update(updates)
                merged["id"] = phase_id
                phase = ProjectPhase.model_validate(merged)
                result = phase
            phases.append(phase)

        if not self._store(self._touch(project.model_copy(update={"phases": phases}))):
            return None
        return result

    def set_phase_status(self, project_id: str, phase_id: str, status: PhaseStatus) -> Optional[ProjectPhase]:
        updates: Dict[str, Any] = {"status": PhaseStatus(status)}
        if updates["status"] == PhaseStatus.COMPLETED:
            updates["progress"] = 100
        return self.update_phase(project_id, phase_id, updates)

    def remove_phase(self, project_id: str, phase_id: str) -> bool:
        """Drop a phase. Other phases listing it as a dependency keep the dangling id."""
        project = self.get(project_id)
        if project is None or project.get_phase(phase_id) is None:
            return False

        phases = [p for p in project.phases if p.id != phase_id]
        return self._store(self._touch(project.model_copy(update={"phases": phases})))

    def can_start_phase(self, project_id: str, phase_id: str) -> bool:
        """All dependency phases completed. A dependency id that no longer exists blocks the phase."""
        project = self.get(project_id)
        if project is None:
            return False
        phase = project.get_phase(phase_id)
        if phase is None:
            return False

        for dep_id in phase.dependencies:
            dep = project.get_phase(dep_id)
            if dep is None or dep.status != PhaseStatus.COMPLETED:
                return False
        return True


# Singleton
_project_repository: Optional[ProjectRepository] = None


def get_project_repository(storage: Optional[StorageAdapter] = None) -> ProjectRepository:
    """Get the project repository singleton."""
    global _project_repository
    if _project_repository is None:
        _project_repository = ProjectRepository(storage)
    return _project_repository
