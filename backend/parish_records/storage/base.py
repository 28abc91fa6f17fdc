# backend/parish_records/storage/base.py
"""Backend-neutral document store interface.

Every collection holds documents keyed by a string ``id``. Services only talk
to :class:`DocumentStore`, so the SQL, Cassandra and Firestore backends are
interchangeable at startup.
"""
from __future__ import annotations

import abc
import operator
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

Document = Dict[str, Any]
Filter = Tuple[str, str, Any]

FILTER_OPS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class StoreError(RuntimeError):
    """Raised when the underlying database rejects or fails an operation."""


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes and convert aware ones; other values pass through."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value


def validate_filters(filters: Iterable[Filter]) -> List[Filter]:
    out = []
    for field, op, value in filters or ():
        if op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator: {op}")
        out.append((field, op, as_utc(value)))
    return out


def matches(doc: Document, filters: Sequence[Filter]) -> bool:
    """Evaluate filters in memory; comparisons against a missing value never match."""
    for field, op, value in filters:
        current = as_utc(doc.get(field))
        if value is None or op in ("==", "!="):
            if not FILTER_OPS[op](current, value):
                return False
            continue
        if current is None:
            return False
        try:
            if not FILTER_OPS[op](current, value):
                return False
        except TypeError:
            return False
    return True


def sort_documents(docs: List[Document], order_by: Optional[str], descending: bool) -> List[Document]:
    """Sort with missing values last, whichever direction is requested."""
    if not order_by:
        return docs
    present = [d for d in docs if d.get(order_by) is not None]
    missing = [d for d in docs if d.get(order_by) is None]
    present.sort(key=lambda d: as_utc(d[order_by]), reverse=descending)
    return present + missing


class DocumentStore(abc.ABC):
    """Minimal document API shared by all persistence backends."""

    backend: str = "abstract"

    @abc.abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abc.abstractmethod
    def set(self, collection: str, doc_id: str, data: Document, merge: bool = True) -> None:
        ...

    @abc.abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    @abc.abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        ...

    @abc.abstractmethod
    def ping(self) -> None:
        """Raise if the backend is unreachable."""

    def create(self, collection: str, data: Document, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or data.get("id") or new_id()
        payload = {k: v for k, v in data.items() if k != "id"}
        self.set(collection, doc_id, payload, merge=False)
        return doc_id

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        return len(self.query(collection, filters))

    def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float = 1,
        defaults: Optional[Document] = None,
    ) -> None:
        current = self.get(collection, doc_id)
        if current is None:
            data = dict(defaults or {})
            data[field] = delta
            self.set(collection, doc_id, data, merge=False)
            return
        data = {field: (current.get(field) or 0) + delta}
        self.set(collection, doc_id, data, merge=True)

    def create_schema(self) -> None:
        """Create tables/keyspaces when the backend needs them. No-op by default."""

    def close(self) -> None:
        """Release connections. No-op by default."""
