"""
Key-value backends for the storage adapter.

Every backend stores one raw JSON string per key and knows nothing about
its contents. Backend failures are raised as StorageError; the adapter
turns them into logged false/empty results.

Backends:
- MemoryBackend: process-local dict (tests, scratch sessions)
- JsonFileBackend: one JSON file holding every key
- SqlBackend: SQLAlchemy key/value table (sqlite, PostgreSQL...)
- RedisBackend: plain Redis string keys
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import redis
from sqlalchemy import DateTime, String, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from ..exceptions import StorageError, StorageSerializationError

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Raw string key-value store."""

    name = "abstract"

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        ...

    def sizes(self, prefix: str = "") -> Dict[str, int]:
        """Length of every stored value, by key."""
        result = {}
        for key in self.keys(prefix):
            value = self.get_item(key)
            if value is not None:
                result[key] = len(value)
        return result


class MemoryBackend(StorageBackend):
    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._data if k.startswith(prefix)]


class JsonFileBackend(StorageBackend):
    """
    Single JSON file mapping key -> raw string.

    The whole file is read on every call and rewritten on every write
    (temp file + rename), mirroring the whole-array semantics above it.
    """

    name = "json"

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except ValueError as e:
            raise StorageSerializationError(f"{self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageSerializationError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._read() if k.startswith(prefix)]


class Base(DeclarativeBase):
    """Base class for storage tables."""
    pass


class StorageItemDB(Base):
    """One key of the key-value store."""

    __tablename__ = "refit_storage"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class SqlBackend(StorageBackend):
    """Key/value table behind a SQLAlchemy engine."""

    name = "sql"

    def __init__(self, database_url: str = None, engine=None):
        if engine is None:
            engine_kwargs = {}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees a fresh empty database
                engine_kwargs = {
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False},
                }
            engine = create_engine(database_url, **engine_kwargs)

        self.engine = engine
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot create storage table: {e}") from e

        logger.info(f"SQL storage ready on {self.engine.url.render_as_string(hide_password=True)}")

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self.session_factory() as session:
                row = session.get(StorageItemDB, key)
                return row.value if row is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read key {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            with self.session_factory.begin() as session:
                row = session.get(StorageItemDB, key)
                if row is None:
                    session.add(StorageItemDB(key=key, value=value))
                else:
                    row.value = value
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write key {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            with self.session_factory.begin() as session:
                session.execute(delete(StorageItemDB).where(StorageItemDB.key == key))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove key {key}: {e}") from e

    def keys(self, prefix: str = "") -> List[str]:
        try:
            with self.session_factory() as session:
                stmt = select(StorageItemDB.key)
                if prefix:
                    stmt = stmt.where(StorageItemDB.key.startswith(prefix, autoescape=True))
                return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list keys: {e}") from e


class RedisBackend(StorageBackend):
    """Plain string keys in a Redis database."""

    name = "redis"

    def __init__(self, redis_url: str = None, client: Optional[redis.Redis] = None):
        if client is None:
            client = redis.Redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
        self.client = client

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            raise StorageError(f"Redis read failed for {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            raise StorageError(f"Redis write failed for {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise StorageError(f"Redis delete failed for {key}: {e}") from e

    def keys(self, prefix: str = "") -> List[str]:
        try:
            return list(self.client.scan_iter(match=f"{prefix}*"))
        except redis.RedisError as e:
            raise StorageError(f"Redis scan failed: {e}") from e


def create_backend(settings) -> StorageBackend:
    """Build the backend named by settings.storage_backend."""
    kind = settings.storage_backend.lower()

    if kind == "memory":
        return MemoryBackend()
    if kind == "json":
        return JsonFileBackend(settings.storage_path)
    if kind == "sql":
        return SqlBackend(settings.database_url)
    if kind == "redis":
        return RedisBackend(settings.redis_url)

    raise ValueError(f"Unknown storage backend '{settings.storage_backend}'. Valid: memory, json, sql, redis")
