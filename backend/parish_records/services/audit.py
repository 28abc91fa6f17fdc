# backend/parish_records/services/audit.py
"""Audit trail writer. A failed audit write is logged and never fails the caller."""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional

from fastapi import Request

from parish_records.storage import DocumentStore, StoreError, new_id, utcnow

logger = logging.getLogger(__name__)

AUDIT_COLLECTION = "audit_logs"


class AuditAction(str, Enum):
    RECORD_ADDED = "Sacrament Record Added"
    RECORD_VIEWED = "Sacrament Record Viewed"
    RECORD_UPDATED = "Sacrament Record Updated"
    RECORD_DELETED = "Sacrament Record Deleted"
    CERTIFICATE_STATUS_UPDATED = "Certificate Status Updated"
    NOTES_BACKFILLED = "Record Notes Backfilled"

    REQUEST_CREATED = "Certificate Request Created"
    REQUEST_UPDATED = "Certificate Request Updated"
    REQUEST_APPROVED = "Certificate Request Approved"
    REQUEST_REJECTED = "Certificate Request Rejected"
    REQUEST_RELEASED = "Certificate Request Marked as Released"
    REQUEST_PRINTED = "Certificate Request Printed"
    REQUEST_CANCELLED = "Certificate Request Cancelled"

    DONATION_CREATED = "Donation Created"
    DONATION_RECONCILED = "Donation Reconciled"
    BOOKING_CREATED = "Booking Created"
    BOOKING_CONFIRMED = "Booking Confirmed"
    EVENT_CREATED = "Event Created"
    CORRECTION_REQUESTED = "Sacrament Correction Requested"

    USER_PROFILE_UPDATED = "User Profile Updated"
    USER_ROLE_UPDATED = "User Role Updated"
    USER_STATUS_UPDATED = "User Status Updated"
    USER_DELETED = "User Deleted"
    USER_DATA_EXPORTED = "User Data Export Generated"
    NOTIFICATION_CREATED = "Notification Created"
    SETTINGS_UPDATED = "Settings Updated"


def serialize_values(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def log_audit(
    store: DocumentStore,
    request: Optional[Request],
    *,
    user_id: Optional[str],
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    old_values: Any = None,
    new_values: Any = None,
) -> Optional[str]:
    """Append one audit entry; returns its id, or None when skipped or failed."""
    action_label = action.value if isinstance(action, AuditAction) else (action or "").strip()
    if not action_label:
        return None

    entry = {
        "user_id": user_id or "system",
        "action": action_label,
        "resource_type": resource_type,
        "resource_id": str(resource_id) if resource_id is not None else None,
        "old_values": serialize_values(old_values),
        "new_values": serialize_values(new_values),
        "timestamp": utcnow(),
        "ip_address": client_ip(request),
        "user_agent": request.headers.get("user-agent") if request is not None else None,
    }
    try:
        return store.create(AUDIT_COLLECTION, entry, doc_id=new_id())
    except StoreError:
        logger.exception("Audit write failed: action=%s resource=%s:%s", action_label, resource_type, resource_id)
        return None
