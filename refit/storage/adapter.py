"""
Storage adapter over a key-value backend.

Every named key holds a JSON array of flat records. Reads and writes are
whole-array: load, modify in memory, write back. There is no locking or
versioning; two writers on the same key lose updates (last writer wins).

Failure contract: serialization errors, backend errors and quota errors are
caught here, logged, and returned as False / [] / None. Callers cannot tell
an empty key from a failed read.
"""

import json
import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from config import settings
from .backends import StorageBackend
from .keys import ALL_KEYS, ARRAY_KEYS, VALUE_KEYS
from ..exceptions import DataResetNotAllowedError, StorageError, StorageQuotaExceededError
from ..utils.datetime_utils import to_iso, utc_now
from ..utils.validation import ValidationResult

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"
STORAGE_WARNING_PERCENT = 90

_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass
class StorageInfo:
    """Usage estimate; sizes are string lengths, as the browser quota counts them."""
    used: int
    total: int
    percentage: float
    keys: List[Tuple[str, int]] = field(default_factory=list)  # largest first


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Unique-enough record id: ``<prefix>-<epoch ms>-<9 base36 chars>``.

    Without a prefix the id is ``<epoch ms>-<9 base36 chars>``.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    if prefix:
        return f"{prefix}-{millis}-{suffix}"
    return f"{millis}-{suffix}"


class StorageAdapter:
    """Array-per-key JSON store with the browser localStorage contract."""

    def __init__(
        self,
        backend: StorageBackend,
        key_prefix: Optional[str] = None,
        quota_bytes: Optional[int] = None,
    ):
        self.backend = backend
        self.key_prefix = settings.storage_key_prefix if key_prefix is None else key_prefix
        self.quota_bytes = settings.storage_quota_bytes if quota_bytes is None else quota_bytes

    # ==================== KEYS ====================

    def full_key(self, key: str) -> str:
        if self.key_prefix and key.startswith(self.key_prefix):
            return key
        return f"{self.key_prefix}{key}"

    def short_key(self, key: str) -> str:
        if self.key_prefix and key.startswith(self.key_prefix):
            return key[len(self.key_prefix):]
        return key

    # ==================== RAW ACCESS ====================

    def _read(self, key: str) -> Any:
        raw = self.backend.get_item(self.full_key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def _write(self, key: str, value: Any) -> None:
        full_key = self.full_key(key)
        raw = json.dumps(value, ensure_ascii=False)
        self._check_quota(full_key, raw)
        self.backend.set_item(full_key, raw)

    def _check_quota(self, full_key: str, raw: str) -> None:
        if not self.quota_bytes:
            return
        sizes = self.backend.sizes(self.key_prefix)
        sizes[full_key] = len(raw)
        used = sum(sizes.values())
        if used > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {full_key} would use {used} of {self.quota_bytes} bytes"
            )

    # ==================== ARRAY OPERATIONS ====================

    def get(self, key: str) -> List[Dict[str, Any]]:
        """Load the array stored under key; [] when absent or unreadable."""
        try:
            data = self._read(key)
        except (StorageError, ValueError) as e:
            logger.error(f"Error reading storage key {key}: {e}")
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            logger.error(f"Storage key {key} does not hold an array")
            return []
        return data

    def set(self, key: str, items: List[Dict[str, Any]]) -> bool:
        """Replace the whole array stored under key."""
        try:
            self._write(key, list(items))
            return True
        except StorageQuotaExceededError as e:
            logger.error(f"Storage quota exceeded writing {key}: {e}")
            return False
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Error writing storage key {key}: {e}")
            return False

    def add(self, key: str, item: Dict[str, Any]) -> bool:
        """Append one record."""
        items = self.get(key)
        items.append(item)
        return self.set(key, items)

    def update(self, key: str, item_id: str, updates: Dict[str, Any]) -> bool:
        """
        Shallow-merge updates into the record with item_id and stamp updatedAt.

        Returns False when the id is not present.
        """
        items = self.get(key)
        for index, item in enumerate(items):
            if item.get("id") == item_id:
                items[index] = {**item, **updates, "updatedAt": to_iso(utc_now())}
                return self.set(key, items)

        logger.debug(f"Update skipped, {item_id} not found in {key}")
        return False

    def delete(self, key: str, item_id: str) -> bool:
        """Drop the record with item_id. Deleting a missing id still rewrites the array."""
        items = self.get(key)
        return self.set(key, [item for item in items if item.get("id") != item_id])

    def find_by_id(self, key: str, item_id: str) -> Optional[Dict[str, Any]]:
        for item in self.get(key):
            if item.get("id") == item_id:
                return item
        return None

    def clear(self, key: str) -> bool:
        """Remove the key entirely."""
        try:
            self.backend.remove_item(self.full_key(key))
            return True
        except StorageError as e:
            logger.error(f"Error clearing storage key {key}: {e}")
            return False

    # ==================== SINGLE VALUES ====================

    def get_value(self, key: str, default: Any = None) -> Any:
        """Load a non-array value (preferences, persisted app state)."""
        try:
            data = self._read(key)
        except (StorageError, ValueError) as e:
            logger.error(f"Error reading storage key {key}: {e}")
            return default
        return default if data is None else data

    def set_value(self, key: str, value: Any) -> bool:
        try:
            self._write(key, value)
            return True
        except StorageQuotaExceededError as e:
            logger.error(f"Storage quota exceeded writing {key}: {e}")
            return False
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Error writing storage key {key}: {e}")
            return False

    # ==================== MAINTENANCE ====================

    def get_storage_info(self) -> StorageInfo:
        try:
            sizes = self.backend.sizes(self.key_prefix)
        except StorageError as e:
            logger.error(f"Error reading storage usage: {e}")
            sizes = {}

        used = sum(sizes.values())
        total = self.quota_bytes or 0
        percentage = (used / total * 100) if total else 0.0
        keys = sorted(sizes.items(), key=lambda kv: kv[1], reverse=True)
        return StorageInfo(used=used, total=total, percentage=percentage, keys=keys)

    def validate_data(self) -> ValidationResult:
        """Check every array key parses to an array and usage is below the warning level."""
        errors = []
        warnings = []

        for key in ARRAY_KEYS:
            try:
                data = self._read(key)
            except StorageError as e:
                errors.append(f"{self.full_key(key)}: Storage read failed ({e})")
                continue
            except ValueError:
                errors.append(f"{self.full_key(key)}: Invalid JSON data")
                continue
            if data is not None and not isinstance(data, list):
                errors.append(f"{self.full_key(key)}: Data is not an array")

        info = self.get_storage_info()
        if info.percentage > STORAGE_WARNING_PERCENT:
            warnings.append(f"Storage usage is above {STORAGE_WARNING_PERCENT}%")

        if errors:
            return ValidationResult.failure(errors, warnings)
        return ValidationResult.success(warnings)

    def export_data(self) -> str:
        """Full snapshot of every known key as pretty-printed JSON."""
        data = {}
        for key in ARRAY_KEYS:
            data[self.full_key(key)] = self.get(key)
        for key in VALUE_KEYS:
            value = self.get_value(key)
            if value is not None:
                data[self.full_key(key)] = value

        snapshot = {
            "exportDate": to_iso(utc_now()),
            "version": SNAPSHOT_VERSION,
            "data": data,
        }
        return json.dumps(snapshot, indent=2, ensure_ascii=False)

    def import_data(self, json_data: str) -> bool:
        """
        Overwrite every recognised key from a snapshot.

        Unknown keys are ignored. Returns False for malformed JSON or a
        snapshot without a ``data`` object; keys written before a failing
        write stay written.
        """
        try:
            backup = json.loads(json_data)
        except (TypeError, ValueError) as e:
            logger.error(f"Error importing data: {e}")
            return False

        if not isinstance(backup, dict) or not isinstance(backup.get("data"), dict):
            logger.error("Error importing data: Invalid backup format")
            return False

        ok = True
        imported = 0
        for full_key, value in backup["data"].items():
            key = self.short_key(full_key)
            if key not in ALL_KEYS:
                logger.debug(f"Ignoring unknown snapshot key {full_key}")
                continue
            if key in ARRAY_KEYS:
                if not isinstance(value, list):
                    logger.warning(f"Snapshot key {full_key} is not an array, skipped")
                    continue
                ok = self.set(key, value) and ok
            else:
                ok = self.set_value(key, value) and ok
            imported += 1

        logger.info(f"Imported {imported} keys from snapshot (version {backup.get('version')})")
        return ok

    def reset_all_data(self) -> bool:
        """Remove every known key. Development mode only."""
        if not settings.is_development:
            raise DataResetNotAllowedError("Data reset is only available in development mode")

        ok = True
        for key in ALL_KEYS:
            ok = self.clear(key) and ok

        logger.warning("All refit data has been reset")
        return ok

    @staticmethod
    def generate_id(prefix: Optional[str] = None) -> str:
        return generate_id(prefix)
