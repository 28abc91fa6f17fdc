# backend/parish_records/storage/sql.py
"""SQLAlchemy-backed document store.

Each collection maps to an ORM model in ``parish_records.models``. Used for
local development, Postgres deployments and the test-suite (SQLite).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Type

from sqlalchemy import create_engine, func, inspect, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from parish_records.models import MODELS, Base
from parish_records.storage.base import (
    Document,
    DocumentStore,
    Filter,
    StoreError,
    as_utc,
    validate_filters,
)

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str, echo: bool) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs = {"echo": echo, "connect_args": {"check_same_thread": False}}
        # in-memory databases live on a single connection
        if url.rstrip("/").endswith(("sqlite:", "sqlite+pysqlite:")) or ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return kwargs


class SqlDocumentStore(DocumentStore):
    backend = "sql"

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine = create_engine(url, **_engine_kwargs(url, echo))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self._column_keys: Dict[str, Dict[str, str]] = {}

    # ---- helpers ------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("SQL store operation failed: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            db.close()

    @staticmethod
    def _model(collection: str) -> Type[Any]:
        try:
            return MODELS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    def _columns(self, collection: str) -> Dict[str, str]:
        """Column name -> mapped attribute key (they differ for reserved names like ``metadata``)."""
        if collection not in self._column_keys:
            mapper = inspect(self._model(collection))
            self._column_keys[collection] = {
                attr.columns[0].name: attr.key for attr in mapper.column_attrs
            }
        return self._column_keys[collection]

    def _attr(self, collection: str, field: str):
        key = self._columns(collection).get(field)
        if key is None:
            raise ValueError(f"{collection} has no field {field!r}")
        return getattr(self._model(collection), key)

    def _values(self, collection: str, data: Document) -> Dict[str, Any]:
        columns = self._columns(collection)
        out: Dict[str, Any] = {}
        for field, value in data.items():
            if field == "id":
                continue
            key = columns.get(field)
            if key is None:
                logger.warning("Dropping unknown field %s.%s", collection, field)
                continue
            out[key] = as_utc(value)
        return out

    def _to_doc(self, collection: str, obj: Any) -> Document:
        return {name: as_utc(getattr(obj, key)) for name, key in self._columns(collection).items()}

    def _where(self, collection: str, filters: Sequence[Filter]):
        clauses = []
        for field, op, value in validate_filters(filters):
            col = self._attr(collection, field)
            if value is None and op == "==":
                clauses.append(col.is_(None))
            elif value is None and op == "!=":
                clauses.append(col.is_not(None))
            elif op == "==":
                clauses.append(col == value)
            elif op == "!=":
                clauses.append(col != value)
            elif op == "<":
                clauses.append(col < value)
            elif op == "<=":
                clauses.append(col <= value)
            elif op == ">":
                clauses.append(col > value)
            else:
                clauses.append(col >= value)
        return clauses

    # ---- DocumentStore --------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        model = self._model(collection)
        with self._session() as db:
            obj = db.get(model, doc_id)
            return self._to_doc(collection, obj) if obj is not None else None

    def set(self, collection: str, doc_id: str, data: Document, merge: bool = True) -> None:
        model = self._model(collection)
        values = self._values(collection, data)
        with self._session() as db:
            obj = db.get(model, doc_id)
            if obj is None:
                db.add(model(id=doc_id, **values))
                return
            if not merge:
                # replace: reset every column not supplied back to its default
                for col in model.__table__.columns:
                    key = self._columns(collection)[col.name]
                    if col.primary_key or key in values:
                        continue
                    default = col.default.arg if col.default is not None and col.default.is_scalar else None
                    setattr(obj, key, default)
            for key, value in values.items():
                setattr(obj, key, value)

    def delete(self, collection: str, doc_id: str) -> bool:
        model = self._model(collection)
        with self._session() as db:
            obj = db.get(model, doc_id)
            if obj is None:
                return False
            db.delete(obj)
            return True

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        model = self._model(collection)
        stmt = select(model).where(*self._where(collection, filters))
        if order_by:
            col = self._attr(collection, order_by)
            # NULLs last in both directions
            stmt = stmt.order_by(col.is_(None), col.desc() if descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as db:
            rows = db.execute(stmt).scalars().all()
            return [self._to_doc(collection, obj) for obj in rows]

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        model = self._model(collection)
        stmt = select(func.count()).select_from(model).where(*self._where(collection, filters))
        with self._session() as db:
            return int(db.execute(stmt).scalar_one())

    def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float = 1,
        defaults: Optional[Document] = None,
    ) -> None:
        model = self._model(collection)
        col = self._attr(collection, field)
        with self._session() as db:
            result = db.execute(
                update(model)
                .where(model.id == doc_id)
                .values({col.key: func.coalesce(col, 0) + delta})
            )
            if result.rowcount:
                return
            values = self._values(collection, defaults or {})
            values[col.key] = delta
            db.add(model(id=doc_id, **values))

    def ping(self) -> None:
        with self._session() as db:
            db.execute(text("SELECT 1"))

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()
