"""
Backends - Durable Key-Value Persistence

The card store depends on persistence only through three calls:
get(key), set(key, value) and remove(key). Backends:

- InMemoryBackend: dict, for tests and throwaway sessions
- SqlAlchemyBackend: one table through SQLAlchemy (SQLite or Postgres)
- MongoBackend: one document per key in a MongoDB collection

Backends raise PersistenceError for any storage failure.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from vocab_srs.config import SrsSettings
from vocab_srs.exceptions import ConfigurationError, PersistenceError
from vocab_srs.storage.models import Base, StoreRecord

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    """Durable key-value persistence collaborator."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryBackend:
    """Key-value backend held in a dict."""

    def __init__(self, data: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqlAlchemyBackend:
    """
    Key-value backend on a relational database.

    Each call runs in its own session and commits before returning.
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._engine = self._create_engine(database_url)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        self.init_db()

    @staticmethod
    def _create_engine(database_url: str) -> Engine:
        """
        Get SQLAlchemy engine for database connection.

        SQLite files get their parent directory created; other drivers
        use a small connection pool.
        """
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(database_url, echo=False)
        return create_engine(
            database_url,
            pool_size=5,           # Keep 5 connections open
            max_overflow=10,       # Allow up to 10 extra connections
            pool_pre_ping=True,    # Verify connections before use
            echo=False
        )

    def init_db(self) -> None:
        """
        Initialize database schema if the table doesn't exist.

        Safe to call multiple times.
        """
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not initialize {self.database_url}: {exc}") from exc

    def _session(self) -> Session:
        return self._sessions()

    def get(self, key: str) -> Optional[str]:
        session = self._session()
        try:
            record = session.get(StoreRecord, key)
            return record.value if record is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Read of {key!r} failed: {exc}") from exc
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        session = self._session()
        try:
            record = session.get(StoreRecord, key)
            now = datetime.now(timezone.utc)
            if record is None:
                session.add(StoreRecord(key=key, value=value, updated_at=now))
            else:
                record.value = value
                record.updated_at = now
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Write of {key!r} failed: {exc}") from exc
        finally:
            session.close()

    def remove(self, key: str) -> None:
        session = self._session()
        try:
            record = session.get(StoreRecord, key)
            if record is not None:
                session.delete(record)
                session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"Delete of {key!r} failed: {exc}") from exc
        finally:
            session.close()

    def dispose(self) -> None:
        self._engine.dispose()


class MongoBackend:
    """Key-value backend on a MongoDB collection (_id = key)."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_uri(cls, mongo_uri: str, db_name: str, collection_name: str) -> "MongoBackend":
        client = MongoClient(
            mongo_uri,
            maxPoolSize=10,  # Connection pool size
            minPoolSize=1,   # Keep at least 1 connection alive
            maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
        )
        return cls(client[db_name][collection_name])

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self._collection.find_one({"_id": key})
        except PyMongoError as exc:
            raise PersistenceError(f"Read of {key!r} failed: {exc}") from exc
        return doc["value"] if doc else None

    def set(self, key: str, value: str) -> None:
        try:
            self._collection.replace_one(
                {"_id": key},
                {"_id": key, "value": value, "updated_at": datetime.now(timezone.utc)},
                upsert=True
            )
        except PyMongoError as exc:
            raise PersistenceError(f"Write of {key!r} failed: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._collection.delete_one({"_id": key})
        except PyMongoError as exc:
            raise PersistenceError(f"Delete of {key!r} failed: {exc}") from exc


def create_backend(settings: SrsSettings) -> KeyValueBackend:
    """
    Build the backend selected by SRS_STORAGE_BACKEND.

    Args:
        settings: Loaded settings

    Returns:
        A KeyValueBackend instance
    """
    if settings.storage_backend == "memory":
        return InMemoryBackend()

    if settings.storage_backend == "sqlalchemy":
        logger.info("Using SQL store at %s", make_url(settings.database_url).render_as_string(hide_password=True))
        return SqlAlchemyBackend(settings.database_url)

    if settings.storage_backend == "mongo":
        if not settings.mongo_uri:
            raise ConfigurationError("MONGO_URI not found in environment variables")
        return MongoBackend.from_uri(settings.mongo_uri, settings.mongo_db, settings.mongo_collection)

    raise ConfigurationError(f"Unknown storage backend: {settings.storage_backend!r}")
