# backend/parish_records/api/admin.py
"""Admin console routes. Every route requires the admin role."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from parish_records import firebase
from parish_records.auth import Principal, invalidate_role, require_admin
from parish_records.db import get_db
from parish_records.schemas.admin import (
    AdminRecordUpdate,
    AuditLogCreate,
    BackfillRequest,
    RoleUpdate,
    SettingsUpdate,
)
from parish_records.services import admin as svc
from parish_records.services import records as records_svc
from parish_records.services import users as users_svc
from parish_records.services.analytics import list_metrics
from parish_records.services.audit import AUDIT_COLLECTION, AuditAction, log_audit, serialize_values
from parish_records.services.common import clamp_limit, parse_datetime
from parish_records.storage import DocumentStore, new_id, utcnow

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


# ---- Settings -----------------------------------------------------------------

@router.get("/settings")
def get_settings(store: DocumentStore = Depends(get_db)):
    return svc.get_settings_doc(store)


@router.put("/settings")
def update_settings(
    payload: SettingsUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    before = svc.get_settings_doc(store)
    settings = svc.save_settings(store, payload.model_dump(exclude_none=True), user.uid)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.SETTINGS_UPDATED,
        resource_type="settings",
        resource_id=svc.GLOBAL_SETTINGS_ID,
        old_values=before,
        new_values=settings,
    )
    return {"message": "Settings updated successfully", "settings": settings}


# ---- Audit logs -----------------------------------------------------------------

@router.get("/logs")
def list_logs(
    limit: Optional[str] = Query(None),
    days: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
):
    rows = svc.list_logs(store, clamp_limit(limit, 100, 500), clamp_limit(days, 7, 365), resource_id=resource_id)
    return {"rows": rows, "count": len(rows)}


@router.post("/logs", status_code=201)
def create_log(payload: AuditLogCreate, store: DocumentStore = Depends(get_db)):
    if not payload.user_id or not payload.action:
        raise HTTPException(status_code=400, detail="Missing user_id or action")

    log_id = payload.id or new_id()
    entry = payload.model_dump(exclude={"id"})
    entry["timestamp"] = parse_datetime(payload.timestamp) or utcnow()
    for key in ("old_values", "new_values"):
        value = entry.get(key)
        if value is not None and not isinstance(value, str):
            entry[key] = serialize_values(value)
    store.create(AUDIT_COLLECTION, entry, doc_id=log_id)
    return {"ok": True, "id": log_id}


@router.delete("/logs/{log_id}")
def delete_log(log_id: str, store: DocumentStore = Depends(get_db)):
    if not store.delete(AUDIT_COLLECTION, log_id):
        raise HTTPException(status_code=404, detail="Log not found")
    return {"ok": True}


# ---- Records ------------------------------------------------------------------

@router.get("/records/recent")
def recent_records(
    limit: Optional[str] = Query(None),
    days: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
):
    docs = records_svc.list_records(
        store, clamp_limit(limit, 100, 300), since_days=clamp_limit(days, 7, 3650)
    )
    return {"rows": [records_svc.to_row(d) for d in docs]}


@router.get("/records")
def list_records(
    limit: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
):
    docs = records_svc.list_records(store, clamp_limit(limit, 50, 200), created_by=user_id)
    rows = []
    for d in docs:
        row = records_svc.to_row(d)
        row["created_by_uid"] = d.get("created_by_uid")
        rows.append(row)
    return {"rows": rows, "count": len(rows)}


@router.put("/records/{record_id}")
def update_record(
    record_id: str,
    payload: AdminRecordUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    if "source" in changes:
        changes["parish_id"] = changes.pop("source")
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    result = records_svc.update_record(store, record_id, changes)
    if result is None:
        raise HTTPException(status_code=404, detail="Record not found")
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_UPDATED,
        resource_type=records_svc.audit_resource(result["new"]),
        resource_id=record_id,
        old_values={k: result["old"].get(k) for k in changes},
        new_values=changes,
    )
    return {"ok": True, "row": records_svc.to_row(result["new"])}


@router.delete("/records/{record_id}")
def delete_record(
    record_id: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    doc = records_svc.soft_delete_record(store, record_id, actor=user.actor, reason="Deleted via admin")
    if doc is None:
        raise HTTPException(status_code=404, detail="Record not found")
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_DELETED,
        resource_type=records_svc.audit_resource(doc),
        resource_id=record_id,
        new_values={"deleted_reason": doc["deleted_reason"]},
    )
    return {"ok": True}


@router.post("/records/backfill-notes")
def backfill_notes(
    request: Request,
    payload: Optional[BackfillRequest] = Body(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    limit = clamp_limit(payload.limit if payload else None, 500, 5000)
    result = records_svc.backfill_notes(store, limit)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.NOTES_BACKFILLED,
        resource_type="records",
        new_values=result,
    )
    return {"message": "Backfill completed", **result}


# ---- Dashboard --------------------------------------------------------------------

@router.get("/summary")
def summary(days: Optional[str] = Query(None), store: DocumentStore = Depends(get_db)):
    return svc.summary(store, clamp_limit(days, 7, 365))


@router.get("/metrics/records/daily")
def records_daily(days: Optional[str] = Query(None), store: DocumentStore = Depends(get_db)):
    return {"days": svc.daily_record_totals(store, clamp_limit(days, 14, 365))}


@router.get("/analytics")
def analytics(
    days: Optional[str] = Query(None),
    metric_type: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
):
    rows = list_metrics(store, clamp_limit(days, 30, 365), metric_type=metric_type)
    return {"rows": rows, "count": len(rows)}


# ---- Users ------------------------------------------------------------------------

@router.get("/users/health")
def users_health(store: DocumentStore = Depends(get_db)):
    store.query(users_svc.USERS, limit=1)
    return {"ok": True}


@router.post("/users/sync")
def users_sync(store: DocumentStore = Depends(get_db)):
    total = users_svc.sync_from_auth(store, firebase.iter_auth_users())
    return {"total": total}


@router.patch("/users/{uid}/role")
def set_user_role(
    uid: str,
    payload: RoleUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    role = (payload.role or "").strip().lower()
    if role not in users_svc.ASSIGNABLE_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")

    before = store.get(users_svc.USERS, uid)
    users_svc.set_role(store, uid, role)
    invalidate_role(uid)
    try:
        firebase.set_admin_claim(uid, role == "admin")
    except Exception:  # uid may not exist in Firebase Auth
        logger.warning("Could not update admin claim for uid=%s", uid, exc_info=True)

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.USER_ROLE_UPDATED,
        resource_type="user",
        resource_id=uid,
        old_values={"role": (before or {}).get("role")},
        new_values={"role": role},
    )
    return {"ok": True, "id": uid, "role": role}


@router.patch("/users/{uid}/status")
def set_user_status(
    uid: str,
    request: Request,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    disabled = payload.get("disabled") if isinstance(payload, dict) else None
    if not isinstance(disabled, bool):
        raise HTTPException(status_code=400, detail="Invalid disabled value")

    try:
        firebase.set_user_disabled(uid, disabled)
    except Exception as exc:
        logger.error("Failed to update auth status for uid=%s: %s", uid, exc)
        raise HTTPException(status_code=502, detail="Failed to update authentication status")
    users_svc.set_disabled(store, uid, disabled)

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.USER_STATUS_UPDATED,
        resource_type="user",
        resource_id=uid,
        new_values={"disabled": disabled},
    )
    return {"ok": True, "id": uid, "disabled": disabled}
