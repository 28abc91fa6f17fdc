# backend/parish_records/storage/firestore.py
"""Firestore-backed document store (firebase-admin / google-cloud-firestore)."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from parish_records.storage.base import (
    Document,
    DocumentStore,
    Filter,
    StoreError,
    as_utc,
    validate_filters,
)

logger = logging.getLogger(__name__)


def _to_doc(snapshot) -> Document:
    data = snapshot.to_dict() or {}
    doc = {key: as_utc(value) for key, value in data.items()}
    doc["id"] = snapshot.id
    return doc


class FirestoreDocumentStore(DocumentStore):
    backend = "firestore"

    def __init__(self, client) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "FirestoreDocumentStore":
        from parish_records import firebase

        return cls(firebase.firestore_client())

    @contextmanager
    def _guard(self, what: str) -> Iterator[None]:
        try:
            yield
        except google_exceptions.GoogleAPICallError as exc:
            logger.error("Firestore %s failed: %s", what, exc)
            raise StoreError(str(exc)) from exc

    def _query(self, collection: str, filters: Sequence[Filter]):
        q = self.client.collection(collection)
        for field, op, value in validate_filters(filters):
            q = q.where(filter=FieldFilter(field, op, value))
        return q

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._guard("get"):
            snap = self.client.collection(collection).document(doc_id).get()
            return _to_doc(snap) if snap.exists else None

    def set(self, collection: str, doc_id: str, data: Document, merge: bool = True) -> None:
        payload = {k: v for k, v in data.items() if k != "id"}
        with self._guard("set"):
            self.client.collection(collection).document(doc_id).set(payload, merge=merge)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._guard("delete"):
            ref = self.client.collection(collection).document(doc_id)
            if not ref.get().exists:
                return False
            ref.delete()
            return True

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        q = self._query(collection, filters)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)
        if limit is not None:
            q = q.limit(limit)
        with self._guard("query"):
            return [_to_doc(snap) for snap in q.stream()]

    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        with self._guard("count"):
            result = self._query(collection, filters).count(alias="total").get()
            return int(result[0][0].value)

    def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        delta: float = 1,
        defaults: Optional[Document] = None,
    ) -> None:
        payload = dict(defaults or {})
        payload[field] = firestore.Increment(delta)
        with self._guard("increment"):
            self.client.collection(collection).document(doc_id).set(payload, merge=True)

    def ping(self) -> None:
        with self._guard("ping"):
            list(self.client.collection("settings").limit(1).stream())
