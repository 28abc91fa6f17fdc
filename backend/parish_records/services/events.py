# backend/parish_records/services/events.py
"""Parish calendar events and bookings."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from parish_records.services.common import to_iso
from parish_records.storage import DocumentStore, new_id, utcnow

EVENTS = "events"
BOOKINGS = "bookings"


def event_to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "parish_id": doc.get("parish_id"),
        "title": doc.get("title"),
        "type": doc.get("type"),
        "starts_at": to_iso(doc.get("starts_at")),
        "ends_at": to_iso(doc.get("ends_at")),
        "location": doc.get("location"),
        "status": doc.get("status") or "scheduled",
        "created_at": to_iso(doc.get("created_at")),
    }


def booking_to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "event_id": doc.get("event_id"),
        "requester_name": doc.get("requester_name"),
        "requester_contact": doc.get("requester_contact"),
        "requester_uid": doc.get("requester_uid"),
        "status": doc.get("status") or "pending",
        "notes": doc.get("notes"),
        "assigned_staff": doc.get("assigned_staff"),
        "confirmed_at": to_iso(doc.get("confirmed_at")),
        "created_at": to_iso(doc.get("created_at")),
    }


def day_window(day: Optional[str], tz_name: str) -> Tuple[date, datetime, datetime]:
    """Resolve ``today``/``YYYY-MM-DD`` to that local day's [start, end) in UTC. Raises ValueError."""
    tz = ZoneInfo(tz_name)
    if not day or day == "today":
        local_day = datetime.now(tz).date()
    else:
        local_day = date.fromisoformat(day)
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return local_day, start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def list_events_for_day(store: DocumentStore, parish_id: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
    filters = [("parish_id", "==", parish_id), ("starts_at", ">=", start), ("starts_at", "<", end)]
    return store.query(EVENTS, filters, order_by="starts_at", limit=200)


def create_event(store: DocumentStore, payload, parish_id: str, uid: str) -> Dict[str, Any]:
    doc = {
        "id": new_id(),
        "parish_id": parish_id,
        "title": payload.title.strip(),
        "type": payload.type,
        "starts_at": payload.starts_at,
        "ends_at": payload.ends_at,
        "location": payload.location,
        "status": payload.status or "scheduled",
        "created_by_uid": uid,
        "created_at": utcnow(),
    }
    store.create(EVENTS, doc, doc_id=doc["id"])
    return store.get(EVENTS, doc["id"]) or doc


def list_bookings(store: DocumentStore, limit: int, event_id: Optional[str] = None) -> List[Dict[str, Any]]:
    filters = [("event_id", "==", event_id)] if event_id else []
    return store.query(BOOKINGS, filters, order_by="created_at", descending=True, limit=limit)


def create_booking(store: DocumentStore, payload) -> Dict[str, Any]:
    doc = {
        "id": new_id(),
        "event_id": payload.event_id,
        "requester_name": payload.requester_name.strip(),
        "requester_contact": payload.requester_contact,
        "requester_uid": payload.requester_uid,
        "status": "pending",
        "notes": payload.notes,
        "assigned_staff": None,
        "confirmed_at": None,
        "created_at": utcnow(),
    }
    store.create(BOOKINGS, doc, doc_id=doc["id"])
    return doc


def confirm_booking(store: DocumentStore, current: Dict[str, Any], staff_uid: str) -> Dict[str, Any]:
    data = {"status": "confirmed", "confirmed_at": utcnow(), "assigned_staff": staff_uid}
    store.set(BOOKINGS, current["id"], data, merge=True)
    return {**current, **data}
