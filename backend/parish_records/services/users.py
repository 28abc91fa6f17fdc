# backend/parish_records/services/users.py
from __future__ import annotations

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from parish_records.services import events as events_svc
from parish_records.services import records as records_svc
from parish_records.services import requests as requests_svc
from parish_records.services.common import to_iso
from parish_records.storage import DocumentStore, new_id, utcnow

logger = logging.getLogger(__name__)

USERS = "users"
CONSENT_LOGS = "privacy_consent_logs"
ASSIGNABLE_ROLES = ("admin", "staff", "finance", "user")
MAX_HOUSEHOLD = 20
EXPORT_MAX_REQUESTS = 500


def to_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["id"],
        "email": doc.get("email"),
        "display_name": doc.get("display_name"),
        "role": doc.get("role") or "staff",
        "created_at": to_iso(doc.get("created_at")),
        "last_login": to_iso(doc.get("last_login")),
        "email_verified": bool(doc.get("email_verified")),
        "disabled": bool(doc.get("disabled")),
    }


def to_profile(doc: Dict[str, Any]) -> Dict[str, Any]:
    row = to_row(doc)
    row.update(
        {
            "phone": doc.get("phone"),
            "address": doc.get("address"),
            "household": doc.get("household") or [],
            "privacy_consent": doc.get("privacy_consent"),
            "privacy_consent_at": to_iso(doc.get("privacy_consent_at")),
        }
    )
    return row


def list_users(store: DocumentStore, limit: int, role: Optional[str] = None) -> List[Dict[str, Any]]:
    filters = [("role", "==", role.strip().lower())] if role else []
    return store.query(USERS, filters, order_by="created_at", descending=True, limit=limit)


def stats_overview(store: DocumentStore) -> Dict[str, Any]:
    return {
        "total_users": store.count(USERS),
        "admin_users": store.count(USERS, [("role", "==", "admin")]),
        "staff_users": store.count(USERS, [("role", "==", "staff")]),
        "timestamp": to_iso(utcnow()),
    }


def update_profile(
    store: DocumentStore,
    uid: str,
    changes: Dict[str, Any],
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    """Merge profile fields; a privacy_consent change is also appended to the consent log."""
    data = dict(changes)
    if "household" in data and data["household"] is not None:
        data["household"] = list(data["household"])[:MAX_HOUSEHOLD]
    now = utcnow()
    if "privacy_consent" in data and data["privacy_consent"] is not None:
        data["privacy_consent_at"] = now
        store.create(
            CONSENT_LOGS,
            {
                "user_id": uid,
                "consent": bool(data["privacy_consent"]),
                "timestamp": now,
                "ip_address": ip_address,
                "user_agent": user_agent,
            },
            doc_id=new_id(),
        )
    data["updated_at"] = now
    existing = store.get(USERS, uid)
    if existing is None:
        data.setdefault("created_at", now)
    store.set(USERS, uid, data, merge=True)
    return store.get(USERS, uid) or {"id": uid, **data}


def set_role(store: DocumentStore, uid: str, role: str) -> None:
    store.set(USERS, uid, {"role": role, "updated_at": utcnow()}, merge=True)


def set_disabled(store: DocumentStore, uid: str, disabled: bool) -> None:
    store.set(USERS, uid, {"disabled": disabled, "updated_at": utcnow()}, merge=True)


def sync_from_auth(store: DocumentStore, auth_users: Iterable[Dict[str, Any]]) -> int:
    """Upsert Firebase Auth accounts into ``users``; existing roles are left untouched."""
    total = 0
    for account in auth_users:
        data: Dict[str, Any] = {
            "email": account.get("email"),
            "display_name": account.get("display_name"),
            "email_verified": bool(account.get("email_verified")),
            "disabled": bool(account.get("disabled")),
            "updated_at": utcnow(),
        }
        if account.get("last_login_ms"):
            data["last_login"] = datetime.fromtimestamp(account["last_login_ms"] / 1000.0, tz=timezone.utc)
        existing = store.get(USERS, account["id"])
        if existing is None:
            data["created_at"] = utcnow()
            data["role"] = "admin" if account.get("is_admin") else None
        store.set(USERS, account["id"], data, merge=True)
        total += 1
    logger.info("Synced %s auth users", total)
    return total


# ─────────────────────────────────────────────────────────────────────────────
# Parishioner self-service
# ─────────────────────────────────────────────────────────────────────────────

def dashboard(store: DocumentStore, uid: str) -> Dict[str, List[Dict[str, Any]]]:
    """Recent requests, bookings and owned records for one parishioner."""
    requests = store.query(
        requests_svc.REQUESTS, [("created_by_uid", "==", uid)], order_by="requested_at", descending=True, limit=5
    )
    bookings = store.query(
        events_svc.BOOKINGS, [("requester_uid", "==", uid)], order_by="created_at", descending=True, limit=5
    )
    records = records_svc.list_records(store, 6, owner_uid=uid)
    return {
        "requests": [requests_svc.to_row(d) for d in requests],
        "appointments": [
            {
                "id": d["id"],
                "event_id": d.get("event_id"),
                "status": d.get("status") or "pending",
                "notes": d.get("notes"),
                "created_at": to_iso(d.get("created_at")),
            }
            for d in bookings
        ],
        "sacraments": [
            {
                "id": d["id"],
                "type": d.get("type"),
                "title": d.get("text"),
                "date": d.get("date"),
                "image_ref": d.get("image_ref"),
                "certificate_status": d.get("certificate_status"),
            }
            for d in records
        ],
    }


def _plain(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: to_iso(v) if isinstance(v, datetime) else v for k, v in doc.items()}


def export_user_data(store: DocumentStore, uid: str) -> Optional[Dict[str, Any]]:
    """Bundle a user's profile and requests as a JSON data URL; None when the user is unknown."""
    profile = store.get(USERS, uid)
    if profile is None:
        return None
    requests = store.query(requests_svc.REQUESTS, [("created_by_uid", "==", uid)], limit=EXPORT_MAX_REQUESTS)
    payload = {
        "user": _plain(profile),
        "requests": [_plain(d) for d in requests],
        "generated_at": to_iso(utcnow()),
    }
    encoded = base64.b64encode(json.dumps(payload, indent=2, default=str).encode("utf-8")).decode("ascii")
    logger.info("User export generated uid=%s requests=%s", uid, len(requests))
    return {
        "name": f"user_export_{uid}.json",
        "mime": "application/json",
        "download_url": f"data:application/json;base64,{encoded}",
    }
