# backend/parish_records/services/requests.py
"""Certificate requests.

Each request lives in ``certificate_requests`` and is mirrored into
``<type>_requests`` so per-sacrament queues can be read without filtering
the shared table. Every status change is applied to both rows.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from parish_records.services.audit import AuditAction
from parish_records.services.common import norm_type, request_collection, to_iso
from parish_records.storage import DocumentStore, new_id, utcnow

logger = logging.getLogger(__name__)

REQUESTS = "certificate_requests"
NON_CANCELLABLE = {"ready", "approved"}

_MIRROR_FIELDS = (
    "parish_id",
    "record_id",
    "requester_name",
    "status",
    "requested_at",
    "processed_at",
    "processed_by",
    "notification_sent",
    "updated_at",
)

_STATUS_ACTIONS = {
    "approved": AuditAction.REQUEST_APPROVED,
    "rejected": AuditAction.REQUEST_REJECTED,
    "released": AuditAction.REQUEST_RELEASED,
    "printed": AuditAction.REQUEST_PRINTED,
}


def audit_action_for_status(status: Optional[str]) -> AuditAction:
    return _STATUS_ACTIONS.get((status or "").lower(), AuditAction.REQUEST_UPDATED)


def to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "parish_id": doc.get("parish_id"),
        "request_id": doc["id"],
        "record_id": doc.get("record_id"),
        "request_type": doc.get("request_type"),
        "requester_name": doc.get("requester_name"),
        "status": doc.get("status") or "pending",
        "requested_at": to_iso(doc.get("requested_at")),
        "processed_at": to_iso(doc.get("processed_at")),
        "processed_by": doc.get("processed_by"),
        "notification_sent": bool(doc.get("notification_sent")),
        "created_by_uid": doc.get("created_by_uid"),
    }


def timeline(doc: Dict[str, Any]) -> List[Dict[str, Any]]:
    status = doc.get("status") or "pending"
    return [
        {"status": "submitted", "at": to_iso(doc.get("created_at") or doc.get("requested_at"))},
        {"status": status, "at": to_iso(doc.get("processed_at")) if status != "pending" else None},
    ]


def _mirror(store: DocumentStore, doc: Dict[str, Any]) -> None:
    data = {k: doc.get(k) for k in _MIRROR_FIELDS if k in doc}
    store.set(request_collection(doc["request_type"]), doc["id"], data, merge=True)


def get_request(store: DocumentStore, request_id: str) -> Optional[Dict[str, Any]]:
    return store.get(REQUESTS, request_id)


def list_requests(
    store: DocumentStore,
    parish_id: str,
    limit: int,
    user_id: Optional[str] = None,
    request_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    filters: List[Any] = [("parish_id", "==", parish_id)]
    if user_id:
        filters.append(("created_by_uid", "==", user_id))
    if request_type:
        filters.append(("request_type", "==", norm_type(request_type)))
    return store.query(REQUESTS, filters, order_by="requested_at", descending=True, limit=limit)


def count_pending(store: DocumentStore, parish_id: str) -> int:
    return store.count(REQUESTS, [("parish_id", "==", parish_id), ("status", "==", "pending")])


def create_request(
    store: DocumentStore,
    *,
    parish_id: str,
    request_type: str,
    requester_name: Optional[str],
    record_id: Optional[str],
    uid: str,
    email: Optional[str],
) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        "id": new_id(),
        "parish_id": parish_id,
        "record_id": record_id,
        "request_type": norm_type(request_type),
        "requester_name": requester_name,
        "status": "pending",
        "requested_at": now,
        "processed_at": None,
        "processed_by": None,
        "notification_sent": False,
        "created_by_uid": uid,
        "created_by_email": email,
        "created_at": now,
        "updated_at": now,
    }
    store.create(REQUESTS, doc, doc_id=doc["id"])
    _mirror(store, doc)
    logger.info("Certificate request created id=%s type=%s", doc["id"], doc["request_type"])
    return doc


def update_request(store: DocumentStore, current: Dict[str, Any], changes: Dict[str, Any], actor: str) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if changes.get("status") is not None:
        data["status"] = changes["status"]
        if changes["status"] != "pending":
            data["processed_at"] = utcnow()
            data["processed_by"] = actor
    if changes.get("notification_sent") is not None:
        data["notification_sent"] = bool(changes["notification_sent"])
    data["updated_at"] = utcnow()

    store.set(REQUESTS, current["id"], data, merge=True)
    updated = {**current, **data}
    _mirror(store, updated)
    return updated


def cancel_request(store: DocumentStore, current: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    data = {"status": "cancelled", "cancelled_at": now, "updated_at": now}
    store.set(REQUESTS, current["id"], data, merge=True)
    updated = {**current, **data}
    _mirror(store, updated)
    return updated
