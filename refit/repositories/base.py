"""
Generic repository over one storage array.

Each repository loads its whole array through the StorageAdapter, parses
records into pydantic models and writes the whole array back. Records that
no longer parse are skipped with a warning rather than failing the read.
"""

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from ..exceptions import EntityNotFoundError, EntityValidationError
from ..models.base import RefitModel
from ..storage import StorageAdapter, generate_id, get_storage
from ..utils.datetime_utils import utc_now
from ..utils.validation import ValidationResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=RefitModel)


def field_errors_from(error: ValidationError) -> Dict[str, str]:
    """Flatten a pydantic error into {dotted.field: message}."""
    errors: Dict[str, str] = {}
    for item in error.errors():
        field_name = ".".join(to_snake(str(part)) for part in item["loc"]) or "__root__"
        errors.setdefault(field_name, item["msg"])
    return errors


class BaseRepository(Generic[ModelT]):
    """CRUD over the array stored under `storage_key`."""

    storage_key: str = ""
    model: Type[ModelT]
    id_prefix: Optional[str] = None
    prepend_new: bool = False  # newest-first arrays (notifications, comments, activity)

    def __init__(self, storage: Optional[StorageAdapter] = None):
        self.storage = storage if storage is not None else get_storage()

    # ==================== LOAD / SAVE ====================

    def _parse(self, raw: Any) -> Optional[ModelT]:
        try:
            return self.model.model_validate(raw)
        except ValidationError as e:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(f"Skipping corrupt {self.storage_key} record {record_id}: {e.error_count()} errors")
            return None

    def _load(self) -> List[ModelT]:
        entities = []
        for raw in self.storage.get(self.storage_key):
            entity = self._parse(raw)
            if entity is not None:
                entities.append(entity)
        return entities

    def _raw_records(self) -> List[Tuple[Dict[str, Any], Optional[ModelT]]]:
        """Stored records beside their parsed model (None when unparseable)."""
        return [(raw, self._parse(raw)) for raw in self.storage.get(self.storage_key)]

    def _save(self, entities: List[ModelT]) -> bool:
        return self.storage.set(self.storage_key, [e.to_storage() for e in entities])

    def _build(self, data: Dict[str, Any]) -> ModelT:
        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            raise EntityValidationError(field_errors_from(e)) from e

    def _touch(self, entity: ModelT) -> ModelT:
        """Stamp the entity's modification time."""
        if "updated_at" in self.model.model_fields:
            return entity.model_copy(update={"updated_at": utc_now()})
        return entity

    def _store(self, entity: ModelT) -> bool:
        """Write one existing entity back in place."""
        return self.storage.update(self.storage_key, entity.id, entity.to_storage())

    # ==================== VALIDATION ====================

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """Form-level checks run before create. Override per entity."""
        return ValidationResult.success()

    # ==================== QUERIES ====================

    def list_all(self) -> List[ModelT]:
        return self._load()

    def get(self, entity_id: str) -> Optional[ModelT]:
        raw = self.storage.find_by_id(self.storage_key, entity_id)
        if raw is None:
            return None
        return self._parse(raw)

    def require(self, entity_id: str) -> ModelT:
        """Like get() but raises EntityNotFoundError."""
        entity = self.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(f"{self.model.__name__} {entity_id} not found")
        return entity

    def count(self) -> int:
        return len(self._load())

    def filter_by(self, predicate: Callable[[ModelT], bool]) -> List[ModelT]:
        return [e for e in self._load() if predicate(e)]

    # ==================== MUTATIONS ====================

    def create(self, data: Dict[str, Any]) -> Optional[ModelT]:
        """
        Validate, assign an id and persist a new entity.

        Raises EntityValidationError before anything is written when a
        required field is missing or malformed. Returns None when the
        storage write fails.
        """
        result = self.validate(data)
        if not result.is_valid:
            raise EntityValidationError(result.field_errors)
        for warning in result.warnings:
            logger.warning(f"{self.model.__name__}: {warning}")

        record = dict(data)
        if not record.get("id"):
            record["id"] = generate_id(self.id_prefix)
        entity = self._build(record)

        if self.prepend_new:
            ok = self.storage.set(self.storage_key, [entity.to_storage()] + self.storage.get(self.storage_key))
        else:
            ok = self.storage.add(self.storage_key, entity.to_storage())
        if not ok:
            return None

        logger.info(f"Created {self.model.__name__} {entity.id}")
        return entity

    def update(self, entity_id: str, updates: Dict[str, Any]) -> Optional[ModelT]:
        """
        Merge updates into an existing entity.

        Returns the updated entity, or None if it does not exist or the
        write failed.
        """
        current = self.get(entity_id)
        if current is None:
            logger.debug(f"{self.model.__name__} {entity_id} not found for update")
            return None

        merged = current.model_dump()
        merged.update(updates)
        merged["id"] = entity_id
        entity = self._touch(self._build(merged))

        if not self._store(entity):
            return None

        logger.info(f"Updated {self.model.__name__} {entity_id}: {list(updates.keys())}")
        return self.get(entity_id)

    def delete(self, entity_id: str) -> bool:
        """Remove by id. No cascade: records referencing it are left as they are."""
        if self.storage.find_by_id(self.storage_key, entity_id) is None:
            logger.debug(f"{self.model.__name__} {entity_id} not found for delete")
            return False

        ok = self.storage.delete(self.storage_key, entity_id)
        if ok:
            logger.info(f"Deleted {self.model.__name__} {entity_id}")
        return ok
