# backend/parish_records/api/records.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import ValidationError

from parish_records.auth import Principal, require_admin, require_auth, require_staff
from parish_records.db import get_db
from parish_records.schemas.records import (
    CertificateStatusUpdate,
    RecordCreate,
    RecordCreated,
    RecordDetail,
    RecordList,
    RecordUpdate,
    parse_details,
)
from parish_records.services import records as svc
from parish_records.services.analytics import record_metric
from parish_records.services.audit import AuditAction, log_audit
from parish_records.services.common import SACRAMENT_TYPES, clamp_limit, norm_type
from parish_records.storage import DocumentStore

router = APIRouter(prefix="/api/records", tags=["Records"])
logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# OpenAPI "examples" for request body
# ─────────────────────────────────────────────────────────────────────────────
CREATE_EXAMPLES: Dict[str, Dict[str, Any]] = {
    "baptism": {
        "summary": "Baptism",
        "description": "Summary row plus register details; notes are generated from the details.",
        "value": {
            "type": "baptism",
            "text": "John Michael Smith",
            "source": "default_parish",
            "date": "2024-01-15",
            "details": {
                "registry_number": "2024-001-B",
                "book_number": "12",
                "page_number": "34",
                "line_number": "5",
                "name": "John Michael Smith",
                "date_of_birth": "2023-12-01",
                "father_name": "Robert Smith",
                "mother_name": "Mary Smith",
                "godfather_name": "Peter Jones",
                "godmother_name": "Anna Jones",
                "date_of_baptism": "2024-01-15",
                "place": "Holy Rosary Parish",
                "minister_name": "Fr. Thomas Reyes",
            },
        },
    },
    "marriage": {
        "summary": "Marriage",
        "value": {
            "type": "marriage",
            "text": "David Johnson and Lisa Brown",
            "details": {
                "registry_number": "2024-001-M",
                "groom_name": "David Johnson",
                "bride_name": "Lisa Brown",
                "date": "2024-02-14",
                "witness1_name": "Mark Lee",
                "witness2_name": "Grace Tan",
            },
        },
    },
}

OPENAPI_REQUEST_EXAMPLES = {
    "requestBody": {"content": {"application/json": {"examples": CREATE_EXAMPLES}}}
}


@router.get("/", response_model=RecordList)
def list_records(
    limit: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    docs = svc.list_records(store, clamp_limit(limit, 50, 200), record_type=type)
    rows = [svc.to_row(d) for d in docs]
    return {"rows": rows, "records": rows, "count": len(rows)}


@router.get("/{record_type}/all")
def list_type_details(
    record_type: str,
    limit: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    t = norm_type(record_type)
    if t not in SACRAMENT_TYPES:
        raise HTTPException(status_code=404, detail="Unknown record type")
    return {"rows": svc.list_details(store, t, clamp_limit(limit, 100, 100))}


@router.get("/{record_id}", response_model=RecordDetail)
def get_record(
    record_id: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_auth),
):
    doc = svc.get_record(store, record_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Record not found")

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_VIEWED,
        resource_type=svc.audit_resource(doc),
        resource_id=record_id,
    )
    return svc.to_detail(doc)


@router.post(
    "/",
    response_model=RecordCreated,
    status_code=status.HTTP_201_CREATED,
    openapi_extra=OPENAPI_REQUEST_EXAMPLES,
)
def create_record(
    payload: RecordCreate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    logger.info("create_record type=%s id=%s details=%s", payload.type, payload.id, bool(payload.details))
    doc = svc.create_record(store, payload, uid=user.uid, email=user.email)

    record_metric(store, "records", f"{doc['type']}_created", 1, {"parish_id": doc["parish_id"]})
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_ADDED,
        resource_type=svc.audit_resource(doc),
        resource_id=doc["id"],
        new_values={"type": doc["type"], "text": doc["text"], "parish_id": doc["parish_id"]},
    )
    return {"message": "Record created successfully", "recordId": doc["id"]}


@router.put("/{record_id}")
def update_record(
    record_id: str,
    payload: RecordUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    changes = payload.model_dump(exclude_unset=True)
    if "source" in changes:
        changes["parish_id"] = changes.pop("source")
    logger.info("update_record id=%s fields=%s", record_id, sorted(changes))

    current = svc.get_record(store, record_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Record not found")
    if changes.get("details") is not None:
        try:
            changes["details"] = parse_details(current.get("type") or "baptism", changes["details"])
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors(include_url=False))

    result = svc.update_record(store, record_id, changes)
    if result is None:
        raise HTTPException(status_code=404, detail="Record not found")

    changed = [k for k in changes if k != "details"]
    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_UPDATED,
        resource_type=svc.audit_resource(result["new"]),
        resource_id=record_id,
        old_values={k: result["old"].get(k) for k in changed},
        new_values={k: result["new"].get(k) for k in changed},
    )
    return {"message": "Record updated successfully", "recordId": record_id}


@router.put("/{record_id}/certificate-status")
def update_certificate_status(
    record_id: str,
    payload: CertificateStatusUpdate,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_staff),
):
    new_status = (payload.status or "").strip()
    if not new_status:
        raise HTTPException(status_code=400, detail="Missing status")

    result = svc.update_record(store, record_id, {"certificate_status": new_status})
    if result is None:
        raise HTTPException(status_code=404, detail="Record not found")

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.CERTIFICATE_STATUS_UPDATED,
        resource_type=svc.audit_resource(result["new"]),
        resource_id=record_id,
        old_values={"certificate_status": result["old"].get("certificate_status")},
        new_values={"certificate_status": new_status},
    )
    return {"message": "Certificate status updated", "recordId": record_id, "certificate_status": new_status}


@router.delete("/{record_id}")
def delete_record(
    record_id: str,
    request: Request,
    store: DocumentStore = Depends(get_db),
    user: Principal = Depends(require_admin),
):
    doc = svc.soft_delete_record(store, record_id, actor=user.actor, reason="Deleted via app")
    if doc is None:
        raise HTTPException(status_code=404, detail="Record not found")

    log_audit(
        store,
        request,
        user_id=user.uid,
        action=AuditAction.RECORD_DELETED,
        resource_type=svc.audit_resource(doc),
        resource_id=record_id,
        old_values={"type": doc.get("type"), "text": doc.get("text")},
        new_values={"deleted_reason": doc["deleted_reason"]},
    )
    return {"message": "Record deleted successfully", "recordId": record_id}
