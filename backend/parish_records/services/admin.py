# backend/parish_records/services/admin.py
"""Admin console: settings, audit log browsing and dashboard aggregates."""
from __future__ import annotations

from collections import Counter
from datetime import timedelta
from typing import Any, Dict, List, Optional

from parish_records.services.audit import AUDIT_COLLECTION
from parish_records.services.common import to_iso
from parish_records.services.records import RECORDS
from parish_records.storage import DocumentStore, utcnow

SETTINGS = "settings"
GLOBAL_SETTINGS_ID = "global"
DEFAULT_SETTINGS: Dict[str, Any] = {
    "language": "en",
    "timezone": "UTC",
    "notify": True,
    "auto_backup": False,
}


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────

def get_settings_doc(store: DocumentStore) -> Dict[str, Any]:
    doc = store.get(SETTINGS, GLOBAL_SETTINGS_ID) or {}
    out = dict(DEFAULT_SETTINGS)
    for key in DEFAULT_SETTINGS:
        if doc.get(key) is not None:
            out[key] = doc[key]
    return out


def save_settings(store: DocumentStore, changes: Dict[str, Any], uid: str) -> Dict[str, Any]:
    current = get_settings_doc(store)
    merged = {**current, **{k: v for k, v in changes.items() if k in DEFAULT_SETTINGS and v is not None}}
    store.set(SETTINGS, GLOBAL_SETTINGS_ID, {**merged, "updated_at": utcnow(), "updated_by": uid}, merge=True)
    return merged


# ─────────────────────────────────────────────────────────────────────────────
# Audit logs
# ─────────────────────────────────────────────────────────────────────────────

def describe_log(doc: Dict[str, Any]) -> str:
    """One-line summary: ``<type> #<id> → <action>`` plus the value change when known."""
    action = doc.get("action") or ""
    rtype, rid = doc.get("resource_type"), doc.get("resource_id")
    target = f"{rtype or 'resource'} #{rid}" if rid else (rtype or "")
    details = f"{target} → {action}" if target else action
    old, new = doc.get("old_values"), doc.get("new_values")
    if old and new:
        details += f" {old} → {new}"
    elif new or old:
        details += f" {new or old}"
    return details


def log_to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "user_id": doc.get("user_id"),
        "action": doc.get("action"),
        "details": describe_log(doc),
        "action_time": to_iso(doc.get("timestamp")),
        "resource_type": doc.get("resource_type"),
        "resource_id": doc.get("resource_id"),
        "old_values": doc.get("old_values"),
        "new_values": doc.get("new_values"),
        "ip_address": doc.get("ip_address"),
        "user_agent": doc.get("user_agent"),
    }


def list_logs(store: DocumentStore, limit: int, days: int, resource_id: Optional[str] = None) -> List[Dict[str, Any]]:
    since = utcnow() - timedelta(days=days)
    filters: List[Any] = [("timestamp", ">=", since)]
    if resource_id:
        # scan a wider window, then narrow in memory
        docs = store.query(AUDIT_COLLECTION, filters, order_by="timestamp", descending=True, limit=min(limit * 10, 1000))
        docs = [d for d in docs if d.get("resource_id") == resource_id][:limit]
    else:
        docs = store.query(AUDIT_COLLECTION, filters, order_by="timestamp", descending=True, limit=limit)
    return [log_to_row(d) for d in docs]


# ─────────────────────────────────────────────────────────────────────────────
# Dashboard aggregates
# ─────────────────────────────────────────────────────────────────────────────

def summary(store: DocumentStore, days: int) -> Dict[str, Any]:
    since = utcnow() - timedelta(days=days)
    recent = store.query(RECORDS, [("deleted_at", "==", None), ("created_at", ">=", since)])
    users = store.query("users")
    return {
        "total_records_last_days": len(recent),
        "records_by_type": dict(Counter((r.get("type") or "unknown") for r in recent)),
        "certificates_by_status": dict(Counter((r.get("certificate_status") or "pending") for r in recent)),
        "total_users": len(users),
        "users_by_role": dict(Counter((u.get("role") or "staff") for u in users)),
        "generated_at": to_iso(utcnow()),
    }


def daily_record_totals(store: DocumentStore, days: int) -> List[Dict[str, Any]]:
    """Records created per UTC day, oldest first, with zero-filled gaps."""
    today = utcnow().date()
    start = today - timedelta(days=days - 1)
    buckets = {(start + timedelta(days=i)).isoformat(): 0 for i in range(days)}
    since = utcnow().replace(year=start.year, month=start.month, day=start.day, hour=0, minute=0, second=0, microsecond=0)
    for doc in store.query(RECORDS, [("deleted_at", "==", None), ("created_at", ">=", since)]):
        created = doc.get("created_at")
        if created is None:
            continue
        key = created.date().isoformat()
        if key in buckets:
            buckets[key] += 1
    return [{"date": day, "total": total} for day, total in buckets.items()]
