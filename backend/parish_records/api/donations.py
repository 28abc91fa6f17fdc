# backend/parish_records/api/donations.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from parish_records.auth import Principal, require_auth, require_finance
from parish_records.db import get_db
from parish_records.schemas.donations import DonationCreate
from parish_records.services import donations as svc
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import clamp_limit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/donations", tags=["Donations"])


@router.get("/", summary="List donations (finance)")
def list_donations(
    limit: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_finance),
):
    rows = [svc.to_row(d) for d in svc.list_donations(store, clamp_limit(limit, 200, 500))]
    return {"rows": rows, "count": len(rows)}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_donation(
    payload: DonationCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    if payload.amount is None or payload.amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid amount")

    doc = svc.create_donation(store, payload, donor_id=user.uid)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.DONATION_CREATED,
        resource_type="donation",
        resource_id=doc["id"],
        new_values={"amount": doc["amount"], "method": doc["method"], "campaign": doc["campaign"]},
    )
    return {"ok": True, "donation_id": doc["id"]}


@router.put("/{donation_id}/reconcile")
def reconcile_donation(
    donation_id: str,
    request: Request,
    payload: Optional[dict] = Body(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_finance),
):
    current = store.get(svc.DONATIONS, donation_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Donation not found")

    requested = (payload or {}).get("reconciled") if isinstance(payload, dict) else None
    if requested is not None and not isinstance(requested, bool):
        raise HTTPException(status_code=400, detail="Invalid reconciled value")

    updated = svc.reconcile(store, current, requested, actor=user.actor)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.DONATION_RECONCILED,
        resource_type="donation",
        resource_id=donation_id,
        old_values={"reconciled": bool(current.get("reconciled"))},
        new_values={"reconciled": updated["reconciled"]},
    )
    return {"ok": True, "reconciled": updated["reconciled"]}
