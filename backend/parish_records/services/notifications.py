# backend/parish_records/services/notifications.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from parish_records.services.common import to_iso
from parish_records.storage import DocumentStore, new_id, utcnow

NOTIFICATIONS = "notifications"
BULK_MAX_IDS = 200
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    created = to_iso(doc.get("created_at"))
    return {
        "id": doc["id"],
        "user_id": doc.get("user_id"),
        "title": doc.get("title"),
        "body": doc.get("body") or doc.get("message"),
        "type": doc.get("type") or "normal",
        "read": bool(doc.get("read")),
        "archived": bool(doc.get("archived")) or doc.get("type") == "archived",
        "createdAt": created,
        "created_at": created,
    }


def can_touch(doc: Dict[str, Any], uid: str, is_admin: bool) -> bool:
    """Non-admins may only change broadcasts and their own notifications."""
    return is_admin or doc.get("user_id") in (None, uid)


def list_notifications(
    store: DocumentStore,
    limit: int,
    uid: str,
    is_admin: bool,
    user_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    if is_admin:
        filters = [("user_id", "==", user_id)] if user_id else []
        return store.query(NOTIFICATIONS, filters, order_by="created_at", descending=True, limit=limit)

    broadcast = store.query(NOTIFICATIONS, [("user_id", "==", None)], order_by="created_at", descending=True, limit=limit)
    own = store.query(NOTIFICATIONS, [("user_id", "==", uid)], order_by="created_at", descending=True, limit=limit)
    merged = {d["id"]: d for d in broadcast + own}.values()
    ordered = sorted(merged, key=lambda d: d.get("created_at") or _EPOCH, reverse=True)
    return ordered[:limit]


def create_notification(
    store: DocumentStore,
    *,
    title: str,
    body: str,
    user_id: Optional[str],
    type_: Optional[str],
    created_by: str,
) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        "id": new_id(),
        "user_id": user_id,
        "title": title,
        "body": body,
        "type": type_ or "normal",
        "read": False,
        "archived": False,
        "created_by_uid": created_by,
        "created_at": now,
        "updated_at": now,
        "expires_at": None,
    }
    store.create(NOTIFICATIONS, doc, doc_id=doc["id"])
    return doc


def set_read(store: DocumentStore, notification_id: str, read: bool) -> None:
    store.set(NOTIFICATIONS, notification_id, {"read": read, "updated_at": utcnow()}, merge=True)


def set_archived(store: DocumentStore, notification_id: str, archived: bool) -> None:
    data = {"archived": archived, "type": "archived" if archived else "normal", "updated_at": utcnow()}
    store.set(NOTIFICATIONS, notification_id, data, merge=True)


def bulk_update(
    store: DocumentStore,
    ids: Iterable[str],
    uid: str,
    is_admin: bool,
    field: str,
    value: bool,
) -> int:
    """Apply read/archived to up to ``BULK_MAX_IDS`` notifications; returns how many changed."""
    updated = 0
    for notification_id in list(ids)[:BULK_MAX_IDS]:
        doc = store.get(NOTIFICATIONS, notification_id)
        if doc is None or not can_touch(doc, uid, is_admin):
            continue
        if field == "archived":
            set_archived(store, notification_id, value)
        else:
            set_read(store, notification_id, value)
        updated += 1
    return updated
