# backend/parish_records/api/requests.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from parish_records.auth import Principal, require_auth, require_staff
from parish_records.config import get_settings
from parish_records.db import get_db
from parish_records.schemas.requests import CertificateRequestCreate, CertificateRequestUpdate
from parish_records.services import requests as svc
from parish_records.services.analytics import record_metric
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import SACRAMENT_TYPES, clamp_limit, norm_type
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/requests", tags=["Certificate Requests"])
logger = logging.getLogger(__name__)


def _list(
    store: DocumentStore,
    user: Principal,
    parish_id: Optional[str],
    limit: Optional[str],
    user_id: Optional[str],
    request_type: Optional[str] = None,
):
    if user_id and user_id != user.uid and not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    docs = svc.list_requests(
        store,
        parish_id or get_settings().parish_id_default,
        clamp_limit(limit, 50, 200),
        user_id=user_id,
        request_type=request_type,
    )
    return {"rows": [svc.to_row(d) for d in docs]}


@router.get("/")
def list_requests(
    parish_id: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    return _list(store, user, parish_id, limit, user_id)


def _typed_listing(request_type: str):
    def _endpoint(
        parish_id: Optional[str] = Query(None),
        limit: Optional[str] = Query(None),
        user_id: Optional[str] = Query(None),
        store: DocumentStore = Depends(get_db),
        user: Principal = Depends(require_auth),
    ):
        return _list(store, user, parish_id, limit, user_id, request_type=request_type)

    _endpoint.__name__ = f"list_{request_type}_requests"
    return _endpoint


# /api/requests/baptism, /marriage, /confirmation, /death (/funeral is the death listing)
for _type in SACRAMENT_TYPES:
    router.add_api_route(f"/{_type}", _typed_listing(_type), methods=["GET"])
router.add_api_route("/funeral", _typed_listing("death"), methods=["GET"], name="list_funeral_requests")


@router.get("/{request_id}")
def get_request(
    request_id: str,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    doc = svc.get_request(store, request_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Request not found")
    if doc.get("created_by_uid") != user.uid and not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    row = svc.to_row(doc)
    row["timeline"] = svc.timeline(doc)
    return {"row": row}


@router.post("/")
def create_request(
    payload: CertificateRequestCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    request_type = norm_type(payload.request_type)
    if request_type not in SACRAMENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid request_type")

    doc = svc.create_request(
        store,
        parish_id=payload.parish_id or get_settings().parish_id_default,
        request_type=request_type,
        requester_name=payload.requester_name,
        record_id=payload.record_id,
        uid=user.uid,
        email=user.email,
    )
    record_metric(store, "requests", f"certificate_{request_type}_created")
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.REQUEST_CREATED,
        resource_type="certificate_request",
        resource_id=doc["id"],
        new_values={"request_type": request_type, "record_id": doc["record_id"], "status": "pending"},
    )
    return {"ok": True, "request_id": doc["id"]}


@router.put("/{request_id}")
def update_request(
    request_id: str,
    payload: CertificateRequestUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    current = svc.get_request(store, request_id)
    if not current:
        raise HTTPException(status_code=404, detail="Request not found")

    updated = svc.update_request(store, current, changes, actor=user.actor)
    logger.info("Certificate request %s updated fields=%s", request_id, sorted(changes))

    if "status" in changes:
        record_metric(store, "requests", f"certificate_status_{changes['status']}")
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=svc.audit_action_for_status(changes.get("status")),
        resource_type="certificate_request",
        resource_id=request_id,
        old_values={k: current.get(k) for k in changes},
        new_values={k: updated.get(k) for k in changes},
    )
    return {"ok": True, "row": svc.to_row(updated)}


@router.post("/{request_id}/cancel")
def cancel_request(
    request_id: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    current = svc.get_request(store, request_id)
    if not current:
        raise HTTPException(status_code=404, detail="Request not found")
    if current.get("created_by_uid") != user.uid:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the requester can cancel")
    if (current.get("status") or "pending") in svc.NON_CANCELLABLE:
        raise HTTPException(status_code=400, detail="Cannot cancel a completed request")

    svc.cancel_request(store, current)
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.REQUEST_CANCELLED,
        resource_type="certificate_request",
        resource_id=request_id,
        old_values={"status": current.get("status") or "pending"},
        new_values={"status": "cancelled"},
    )
    return {"ok": True}
