# backend/parish_records/api/sacraments.py
"""Parishioner-facing view of their own sacrament records."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from parish_records.auth import Principal, ensure_self_or_staff, require_auth
from parish_records.db import get_db
from parish_records.schemas.misc import CorrectionCreate
from parish_records.services import records as records_svc
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import clamp_limit
from parish_records.storage import DocumentStore, new_id, utcnow

router = APIRouter(prefix="/api/sacraments", tags=["Sacraments"])

CORRECTION_TICKETS = "correction_tickets"


@router.get("/")
def list_owned_sacraments(
    owner_id: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    if not owner_id:
        raise HTTPException(status_code=400, detail="Missing owner_id")
    ensure_self_or_staff(user, owner_id)

    docs = records_svc.list_records(store, clamp_limit(limit, 30, 200), owner_uid=owner_id)
    return {"rows": [records_svc.to_detail(d) for d in docs]}


@router.post("/{record_id}/correction", status_code=status.HTTP_201_CREATED)
def request_correction(
    record_id: str,
    payload: CorrectionCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    record = records_svc.get_record(store, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    if record.get("owner_uid") not in (None, user.uid) and not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    ticket_id = store.create(
        CORRECTION_TICKETS,
        {
            "record_id": record_id,
            "message": payload.message,
            "status": "open",
            "created_by_uid": user.uid,
            "created_at": utcnow(),
        },
        doc_id=new_id(),
    )
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.CORRECTION_REQUESTED,
        resource_type=records_svc.audit_resource(record),
        resource_id=record_id,
        new_values={"ticket_id": ticket_id, "message": payload.message},
    )
    return {"ok": True, "ticket_id": ticket_id}
