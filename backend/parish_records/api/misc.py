# backend/parish_records/api/misc.py
"""Client audit ingest and verification-code email."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from parish_records.auth import Principal, require_auth
from parish_records.db import get_db
from parish_records.schemas.misc import ClientAuditEvent, SendCodeRequest
from parish_records.services import email as email_svc
from parish_records.services.audit import log_audit
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api", tags=["Misc"])
logger = logging.getLogger(__name__)


@router.post("/audit", status_code=status.HTTP_201_CREATED)
def ingest_audit(
    payload: ClientAuditEvent,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    action = (payload.action or "").strip()
    if not action:
        raise HTTPException(status_code=400, detail="Missing action")
    log_id = log_audit(
        store,
        request,
        user_id=user.uid,
        action=action,
        resource_type=payload.resource_type,
        resource_id=payload.resource_id,
        old_values=payload.old_values,
        new_values=payload.new_values,
    )
    return {"ok": log_id is not None, "id": log_id}


@router.post("/auth/send-code")
def send_code(payload: SendCodeRequest, user: Principal = Depends(require_auth)):
    email = (payload.email or "").strip()
    code = (payload.code or "").strip()
    if not email or not code:
        raise HTTPException(status_code=400, detail="Missing email or code")
    try:
        email_svc.send_verification_code(email, code)
    except (email_svc.EmailNotConfigured, email_svc.EmailSendError) as exc:
        logger.error("send-code failed for %s: %s", email, exc)
        raise HTTPException(status_code=500, detail="Failed to send verification code")
    return {"ok": True}
