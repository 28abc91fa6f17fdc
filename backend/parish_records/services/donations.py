# backend/parish_records/services/donations.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from parish_records.services.common import parse_datetime, to_iso
from parish_records.storage import DocumentStore, new_id, utcnow

DONATIONS = "donations"


def to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "date": to_iso(doc.get("date")),
        "donor_name": doc.get("donor_name"),
        "donor_id": doc.get("donor_id"),
        "anonymous": bool(doc.get("anonymous")),
        "amount": float(doc.get("amount") or 0),
        "method": doc.get("method") or "cash",
        "campaign": doc.get("campaign"),
        "reconciled": bool(doc.get("reconciled")),
        "reconciled_at": to_iso(doc.get("reconciled_at")),
        "receipt_url": doc.get("receipt_url"),
        "created_at": to_iso(doc.get("created_at")),
        "updated_at": to_iso(doc.get("updated_at")),
    }


def list_donations(store: DocumentStore, limit: int) -> List[Dict[str, Any]]:
    return store.query(DONATIONS, order_by="date", descending=True, limit=limit)


def create_donation(store: DocumentStore, payload, donor_id: str) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        "id": new_id(),
        "date": parse_datetime(payload.date) or now,
        "donor_name": None if payload.anonymous else payload.donor_name,
        "donor_id": donor_id,
        "anonymous": bool(payload.anonymous),
        "amount": float(payload.amount),
        "method": (payload.method or "cash").strip().lower(),
        "campaign": payload.campaign,
        "reconciled": False,
        "reconciled_at": None,
        "reconciled_by": None,
        "receipt_url": payload.receipt_url,
        "created_at": now,
        "updated_at": now,
    }
    store.create(DONATIONS, doc, doc_id=doc["id"])
    return doc


def reconcile(store: DocumentStore, current: Dict[str, Any], reconciled: Optional[bool], actor: str) -> Dict[str, Any]:
    """Set (or toggle, when ``reconciled`` is None) the reconciled flag."""
    value = (not bool(current.get("reconciled"))) if reconciled is None else bool(reconciled)
    now = utcnow()
    data = {
        "reconciled": value,
        "reconciled_at": now if value else None,
        "reconciled_by": actor if value else None,
        "updated_at": now,
    }
    store.set(DONATIONS, current["id"], data, merge=True)
    return {**current, **data}
