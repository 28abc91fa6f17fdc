# backend/parish_records/api/bookings.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from parish_records.auth import Principal, require_staff
from parish_records.db import get_db
from parish_records.schemas.events import BookingCreate
from parish_records.services import events as svc
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import clamp_limit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/bookings", tags=["Bookings"], dependencies=[Depends(require_staff)])


@router.get("/")
def list_bookings(
    event_id: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
):
    rows = [svc.booking_to_row(d) for d in svc.list_bookings(store, clamp_limit(limit, 100, 200), event_id)]
    return {"rows": rows, "count": len(rows)}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    if store.get(svc.EVENTS, payload.event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    doc = svc.create_booking(store, payload)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.BOOKING_CREATED,
        resource_type="booking",
        resource_id=doc["id"],
        new_values={"event_id": doc["event_id"], "requester_name": doc["requester_name"]},
    )
    return svc.booking_to_row(doc)


@router.post("/{booking_id}/confirm")
def confirm_booking(
    booking_id: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    current = store.get(svc.BOOKINGS, booking_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    updated = svc.confirm_booking(store, current, user.uid)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.BOOKING_CONFIRMED,
        resource_type="booking",
        resource_id=booking_id,
        old_values={"status": current.get("status") or "pending"},
        new_values={"status": "confirmed"},
    )
    return {"ok": True, "row": svc.booking_to_row(updated)}
