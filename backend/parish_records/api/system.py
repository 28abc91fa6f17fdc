# backend/parish_records/api/system.py
from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from parish_records import __version__
from parish_records.config import get_settings
from parish_records.db import get_db
from parish_records.services.common import to_iso
from parish_records.storage import DocumentStore, utcnow

router = APIRouter(tags=["ops"])


@router.get("/health")
def health(store: DocumentStore = Depends(get_db)):
    """Liveness check with a lightweight store ping and local time."""
    tz = get_settings().timezone
    database = {"backend": store.backend, "status": "ok"}
    try:
        store.ping()
    except Exception as e:
        database["status"] = f"error: {type(e).__name__}"

    return {
        "status": "OK",
        "timestamp": to_iso(utcnow()),
        "time": {"tz": tz, "now": datetime.now(ZoneInfo(tz)).isoformat()},
        "database": database,
    }


@router.get("/version")
def version(store: DocumentStore = Depends(get_db)):
    """Minimal runtime info; confirms which store backend is active."""
    return {
        "app": "Parish Records API",
        "version": __version__,
        "db_backend": store.backend,
        "tz": get_settings().timezone,
    }
