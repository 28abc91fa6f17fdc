# backend/parish_records/api/users.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from parish_records import firebase
from parish_records.auth import Principal, ensure_self_or_staff, invalidate_role, require_admin, require_auth
from parish_records.db import get_db
from parish_records.schemas.users import UserProfileUpdate
from parish_records.services import users as svc
from parish_records.services.audit import AuditAction, client_ip, log_audit
from parish_records.services.common import clamp_limit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/users", tags=["Users"])
logger = logging.getLogger(__name__)


@router.get("/")
def list_users(
    limit: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    docs = svc.list_users(store, clamp_limit(limit, 100, 200), role=role)
    rows = [svc.to_row(d) for d in docs]
    return {"rows": rows, "count": len(rows)}


@router.get("/stats/overview")
def stats_overview(store: DocumentStore = Depends(get_db), user: Principal = Depends(require_admin)):
    return svc.stats_overview(store)


@router.get("/{uid}")
def get_profile(uid: str, store: DocumentStore = Depends(get_db), user: Principal = Depends(require_auth)):
    ensure_self_or_staff(user, uid)
    doc = store.get(svc.USERS, uid)
    if doc is None:
        raise HTTPException(status_code=404, detail="User not found")
    return svc.to_profile(doc)


@router.get("/{uid}/dashboard")
def user_dashboard(uid: str, store: DocumentStore = Depends(get_db), user: Principal = Depends(require_auth)):
    ensure_self_or_staff(user, uid)
    return svc.dashboard(store, uid)


@router.post("/{uid}/export")
def export_user_data(
    uid: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    ensure_self_or_staff(user, uid)
    file = svc.export_user_data(store, uid)
    if file is None:
        raise HTTPException(status_code=404, detail="User not found")
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.USER_DATA_EXPORTED,
        resource_type="user_export",
        resource_id=uid,
    )
    return {"ok": True, "file": file}


@router.put("/{uid}")
def update_profile(
    uid: str,
    payload: UserProfileUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    ensure_self_or_staff(user, uid)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    before = store.get(svc.USERS, uid) or {}
    doc = svc.update_profile(
        store, uid, changes, ip_address=client_ip(request), user_agent=request.headers.get("user-agent")
    )
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.USER_PROFILE_UPDATED,
        resource_type="user",
        resource_id=uid,
        old_values={k: before.get(k) for k in changes},
        new_values={k: doc.get(k) for k in changes},
    )
    return svc.to_profile(doc)


@router.delete("/{uid}")
def delete_user(
    uid: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    if not store.delete(svc.USERS, uid):
        raise HTTPException(status_code=404, detail="User not found")
    invalidate_role(uid)
    try:
        firebase.delete_auth_user(uid)
    except Exception:  # profile row is already removed
        logger.warning("Auth user %s could not be deleted", uid, exc_info=True)

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.USER_DELETED,
        resource_type="user",
        resource_id=uid,
    )
    return {"ok": True}
