# backend/parish_records/api/staff.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from parish_records.auth import require_staff
from parish_records.config import get_settings
from parish_records.db import get_db
from parish_records.services import events as events_svc
from parish_records.services import requests as requests_svc
from parish_records.services.common import to_iso
from parish_records.storage import DocumentStore, utcnow

router = APIRouter(prefix="/api/staff", tags=["Staff"], dependencies=[Depends(require_staff)])


@router.get("/worktray")
def worktray(parish_id: Optional[str] = Query(None), store: DocumentStore = Depends(get_db)):
    """Pending certificate requests and today's events for one parish."""
    settings = get_settings()
    parish_id = parish_id or settings.parish_id_default
    _, start, end = events_svc.day_window("today", settings.timezone)
    events = events_svc.list_events_for_day(store, parish_id, start, end)
    return {
        "generated_at": to_iso(utcnow()),
        "parish_id": parish_id,
        "pending_requests": requests_svc.count_pending(store, parish_id),
        "schedule_today": [events_svc.event_to_row(d) for d in events],
    }
