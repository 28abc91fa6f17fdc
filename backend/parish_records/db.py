# backend/parish_records/db.py
"""Declarative base plus the request-scoped store dependency."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterator

from sqlalchemy.orm import declarative_base

from parish_records.config import get_settings
from parish_records.storage.base import DocumentStore

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_store(backend: str | None = None) -> DocumentStore:
    """Instantiate the configured backend (``sql``, ``cassandra`` or ``firestore``)."""
    settings = get_settings()
    backend = (backend or settings.db_backend or "sql").lower()

    if backend == "sql":
        from parish_records.storage.sql import SqlDocumentStore

        return SqlDocumentStore(settings.database_url, echo=settings.sql_echo)
    if backend == "cassandra":
        from parish_records.storage.cassandra import CassandraDocumentStore

        return CassandraDocumentStore.from_settings(settings)
    if backend == "firestore":
        from parish_records.storage.firestore import FirestoreDocumentStore

        return FirestoreDocumentStore.from_settings(settings)
    raise ValueError(f"Unknown DB_BACKEND: {backend!r}")


@lru_cache()
def get_store() -> DocumentStore:
    store = build_store()
    logger.info("Document store ready: backend=%s", store.backend)
    return store


# Dependency to inject the document store
def get_db() -> Iterator[DocumentStore]:
    yield get_store()
