"""
Persistence layer: key-value backends and the array-per-key adapter.

Use get_storage() for the process-wide adapter built from settings.
"""

import logging
from typing import Optional

from config import settings
from .adapter import StorageAdapter, StorageInfo, generate_id
from .backends import (
    StorageBackend,
    MemoryBackend,
    JsonFileBackend,
    SqlBackend,
    RedisBackend,
    create_backend,
)
from .keys import StorageKeys, ARRAY_KEYS, VALUE_KEYS, ALL_KEYS

logger = logging.getLogger(__name__)

# Global adapter instance
_storage: Optional[StorageAdapter] = None


def get_storage() -> StorageAdapter:
    """Get or create the storage adapter configured in settings."""
    global _storage
    if _storage is None:
        _storage = StorageAdapter(create_backend(settings))
        logger.info(f"Storage adapter created ({settings.storage_backend} backend)")
    return _storage


def set_storage(storage: Optional[StorageAdapter]) -> None:
    """Replace the global adapter (None forces a rebuild on next use)."""
    global _storage
    _storage = storage


__all__ = [
    "StorageAdapter",
    "StorageInfo",
    "generate_id",
    "StorageBackend",
    "MemoryBackend",
    "JsonFileBackend",
    "SqlBackend",
    "RedisBackend",
    "create_backend",
    "StorageKeys",
    "ARRAY_KEYS",
    "VALUE_KEYS",
    "ALL_KEYS",
    "get_storage",
    "set_storage",
]
