# backend/parish_records/services/records.py
"""Sacrament record lifecycle.

A record is written as a summary row in ``records`` plus (when register
details are supplied) a detail row with the same id in ``<type>_records``.
The summary's ``notes`` JSON is rebuilt from the detail row unless the
caller supplies notes explicitly.
"""
from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from parish_records.config import get_settings
from parish_records.services.common import detail_collection, norm_type, to_iso
from parish_records.services.record_notes import build_notes, dumps_notes, load_notes
from parish_records.storage import DocumentStore, new_id, utcnow

logger = logging.getLogger(__name__)

RECORDS = "records"

# summary fields a PUT may touch
UPDATABLE_FIELDS = (
    "text",
    "parish_id",
    "image_ref",
    "notes",
    "date",
    "place",
    "registry_number",
    "certificate_status",
    "owner_uid",
)


# ─────────────────────────────────────────────────────────────────────────────
# Shapes
# ─────────────────────────────────────────────────────────────────────────────

def _notes_text(notes: Any) -> Optional[str]:
    if notes is None or isinstance(notes, str):
        return notes
    return json.dumps(notes)


def to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    """List shape used by the records table views."""
    return {
        "id": doc["id"],
        "type": doc.get("type") or "baptism",
        "text": doc.get("text"),
        "image_ref": doc.get("image_ref"),
        "source": doc.get("parish_id"),
        "notes": doc.get("notes"),
        "created_at": to_iso(doc.get("created_at")),
        "certificate_status": doc.get("certificate_status"),
    }


def to_detail(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "type": doc.get("type") or "baptism",
        "name": doc.get("text"),
        "notes": doc.get("notes"),
        "date": doc.get("date") or to_iso(doc.get("created_at")),
        "parish": doc.get("parish_id"),
        "place": doc.get("place"),
        "certificate_status": doc.get("certificate_status"),
        "created_at": to_iso(doc.get("created_at")),
    }


def audit_resource(doc: Dict[str, Any]) -> str:
    """Audit ``resource_type`` for a record, e.g. ``baptism_record``."""
    return f"{doc.get('type') or 'baptism'}_record"


def is_deleted(doc: Optional[Dict[str, Any]]) -> bool:
    return bool(doc and doc.get("deleted_at"))


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────

def get_record(store: DocumentStore, record_id: str, include_deleted: bool = False) -> Optional[Dict[str, Any]]:
    doc = store.get(RECORDS, record_id)
    if doc is None or (is_deleted(doc) and not include_deleted):
        return None
    return doc


def list_records(
    store: DocumentStore,
    limit: int,
    record_type: Optional[str] = None,
    created_by: Optional[str] = None,
    owner_uid: Optional[str] = None,
    since_days: Optional[int] = None,
) -> List[Dict[str, Any]]:
    filters: List[Any] = [("deleted_at", "==", None)]
    if record_type:
        filters.append(("type", "==", norm_type(record_type)))
    if created_by:
        filters.append(("created_by_uid", "==", created_by))
    if owner_uid:
        filters.append(("owner_uid", "==", owner_uid))
    if since_days:
        filters.append(("created_at", ">=", utcnow() - timedelta(days=since_days)))
    return store.query(RECORDS, filters, order_by="created_at", descending=True, limit=limit)


def list_details(store: DocumentStore, record_type: str, limit: int) -> List[Dict[str, Any]]:
    rows = store.query(detail_collection(record_type), order_by="created_at", descending=True, limit=limit)
    for row in rows:
        for key in ("created_at", "updated_at"):
            row[key] = to_iso(row.get(key))
    return rows


# ─────────────────────────────────────────────────────────────────────────────
# Writes
# ─────────────────────────────────────────────────────────────────────────────

def _write_details(store: DocumentStore, record_type: str, record_id: str, parish_id: str,
                   details: Dict[str, Any], created_at=None) -> Dict[str, Any]:
    data = dict(details)
    data["parish_id"] = parish_id
    data["updated_at"] = utcnow()
    if created_at is not None:
        data["created_at"] = created_at
    store.set(detail_collection(record_type), record_id, data, merge=True)
    return store.get(detail_collection(record_type), record_id) or data


def create_record(store: DocumentStore, payload, uid: Optional[str], email: Optional[str]) -> Dict[str, Any]:
    """Persist summary (+ detail) row; returns the stored summary document."""
    record_type = norm_type(payload.type)
    record_id = payload.id or new_id()
    parish_id = payload.source or get_settings().parish_id_default
    now = utcnow()

    summary: Dict[str, Any] = {
        "type": record_type,
        "text": payload.text or "Unnamed Record",
        "parish_id": parish_id,
        "image_ref": payload.image_ref,
        "date": payload.date,
        "place": payload.place,
        "registry_number": payload.registry_number,
        "notes": _notes_text(payload.notes),
        "certificate_status": payload.certificate_status or "pending",
        "owner_uid": payload.owner_uid,
        "created_by_uid": uid,
        "created_by_email": email,
        "created_at": now,
        "updated_at": now,
        "deleted_at": None,
        "deleted_by": None,
        "deleted_reason": None,
    }

    if payload.details:
        detail = _write_details(store, record_type, record_id, parish_id, payload.details, created_at=now)
        if summary["notes"] is None:
            summary["notes"] = dumps_notes(build_notes({"id": record_id, **summary}, detail))
        summary["registry_number"] = summary["registry_number"] or detail.get("registry_number")

    store.create(RECORDS, summary, doc_id=record_id)
    logger.info("Record created id=%s type=%s parish=%s", record_id, record_type, parish_id)
    return {"id": record_id, **summary}


def update_record(store: DocumentStore, record_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a partial update; returns ``{"old", "new"}`` summary docs, or None when the record is missing."""
    current = get_record(store, record_id)
    if current is None:
        return None

    data = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "notes" in data:
        data["notes"] = _notes_text(data["notes"])

    details = changes.get("details")
    if details:
        parish_id = data.get("parish_id") or current.get("parish_id") or get_settings().parish_id_default
        detail = _write_details(store, current["type"], record_id, parish_id, details)
        if "notes" not in data:
            data["notes"] = dumps_notes(build_notes({**current, **data}, detail))

    data["updated_at"] = utcnow()
    store.set(RECORDS, record_id, data, merge=True)
    return {"old": current, "new": {**current, **data}}


def soft_delete_record(store: DocumentStore, record_id: str, actor: str, reason: str) -> Optional[Dict[str, Any]]:
    current = get_record(store, record_id)
    if current is None:
        return None
    data = {
        "deleted_at": utcnow(),
        "deleted_by": actor,
        "deleted_reason": reason,
        "updated_at": utcnow(),
    }
    store.set(RECORDS, record_id, data, merge=True)
    return {**current, **data}


def backfill_notes(store: DocumentStore, limit: int) -> Dict[str, int]:
    """Fill ``notes`` for summary rows that have none, from their detail rows."""
    missing = [
        doc for doc in store.query(RECORDS, [("deleted_at", "==", None)])
        if not doc.get("notes")
    ]
    processed = 0
    for doc in missing:
        if processed >= limit:
            break
        notes = load_notes(store, doc)
        if notes is None:
            continue
        store.set(RECORDS, doc["id"], {"notes": dumps_notes(notes), "updated_at": utcnow()}, merge=True)
        processed += 1
    logger.info("Notes backfill processed=%s missing=%s", processed, len(missing))
    return {"processed": processed, "total_missing": len(missing)}
