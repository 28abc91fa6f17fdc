# backend/parish_records/api/notifications.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, status

from parish_records.auth import Principal, require_admin, require_auth, require_staff
from parish_records.db import get_db
from parish_records.schemas.notifications import NotificationCreate
from parish_records.services import notifications as svc
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import clamp_limit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = logging.getLogger(__name__)


def _bool_field(payload: Dict[str, Any], key: str) -> bool:
    value = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(value, bool):
        raise HTTPException(status_code=400, detail=f"Invalid {key} value")
    return value


def _bulk_ids(payload: Dict[str, Any], key: str):
    ids = payload.get("ids") if isinstance(payload, dict) else None
    if not isinstance(ids, list) or not ids:
        raise HTTPException(status_code=400, detail="ids must be a non-empty array")
    return [str(i) for i in ids], _bool_field(payload, key)


@router.get("/")
def list_notifications(
    limit: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    docs = svc.list_notifications(
        store, clamp_limit(limit, 100, 300), uid=user.uid, is_admin=user.is_admin, user_id=user_id
    )
    rows = [svc.to_row(d) for d in docs]
    return {"rows": rows, "count": len(rows)}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    title = (payload.title or "").strip()
    body = (payload.body or "").strip()
    if not title or not body:
        raise HTTPException(status_code=400, detail="Missing title or body")

    doc = svc.create_notification(
        store, title=title, body=body, user_id=payload.user_id, type_=payload.type, created_by=user.uid
    )
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.NOTIFICATION_CREATED,
        resource_type="notification",
        resource_id=doc["id"],
        new_values={"title": title, "user_id": payload.user_id},
    )
    return svc.to_row(doc)


@router.patch("/{notification_id}/read")
def mark_read(
    notification_id: str,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    read = _bool_field(payload, "read")
    doc = store.get(svc.NOTIFICATIONS, notification_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not user.is_staff and not svc.can_touch(doc, user.uid, user.is_admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    svc.set_read(store, notification_id, read)
    return {"ok": True, "id": notification_id, "read": read}


@router.patch("/{notification_id}/archive")
def archive(
    notification_id: str,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    archived = _bool_field(payload, "archived")
    if store.get(svc.NOTIFICATIONS, notification_id) is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    svc.set_archived(store, notification_id, archived)
    return {"ok": True, "id": notification_id, "archived": archived}


@router.post("/bulk/read")
def bulk_read(
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    ids, read = _bulk_ids(payload, "read")
    updated = svc.bulk_update(store, ids, user.uid, user.is_admin, "read", read)
    return {"ok": True, "updated": updated}


@router.post("/bulk/archive")
def bulk_archive(
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    ids, archived = _bulk_ids(payload, "archived")
    updated = svc.bulk_update(store, ids, user.uid, user.is_admin, "archived", archived)
    return {"ok": True, "updated": updated}


# 204 must have no body; return Response explicitly
@router.delete("/{notification_id}", status_code=204, response_class=Response)
def delete_notification(
    notification_id: str,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
) -> Response:
    if not store.delete(svc.NOTIFICATIONS, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return Response(status_code=204)
