# backend/parish_records/api/events.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from parish_records.auth import Principal, require_staff
from parish_records.config import get_settings
from parish_records.db import get_db
from parish_records.schemas.events import EventCreate
from parish_records.services import events as svc
from parish_records.services.audit import AuditAction, log_audit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/events", tags=["Events"])
logger = logging.getLogger(__name__)


@router.get("/")
def list_events(
    date: Optional[str] = Query("today", description="'today' or YYYY-MM-DD (parish local time)"),
    parish_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    settings = get_settings()
    try:
        day, start, end = svc.day_window(date, settings.timezone)
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be 'today' or YYYY-MM-DD")

    parish = parish_id or settings.parish_id_default
    rows = [svc.event_to_row(d) for d in svc.list_events_for_day(store, parish, start, end)]
    return {"parish_id": parish, "date": day.isoformat(), "rows": rows}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    doc = svc.create_event(store, payload, payload.parish_id or get_settings().parish_id_default, user.uid)
    logger.info("Event created id=%s starts_at=%s", doc["id"], doc.get("starts_at"))
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.EVENT_CREATED,
        resource_type="event",
        resource_id=doc["id"],
        new_values={"title": doc["title"], "starts_at": payload.starts_at.isoformat()},
    )
    return svc.event_to_row(doc)
