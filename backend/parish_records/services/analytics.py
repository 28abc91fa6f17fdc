# backend/parish_records/services/analytics.py
from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Any, Dict, List, Optional

from parish_records.storage import DocumentStore, StoreError, utcnow

logger = logging.getLogger(__name__)

ANALYTICS_COLLECTION = "analytics"
_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")


def metric_doc_id(day: str, metric_type: str, metric_name: str) -> str:
    return _UNSAFE.sub("_", f"{day}_{metric_type}_{metric_name}")[:250]


def record_metric(
    store: DocumentStore,
    metric_type: str = "general",
    metric_name: str = "unknown",
    delta: float = 1,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """Bump today's (UTC) counter for ``metric_type/metric_name``; failures are only logged."""
    now = utcnow()
    day = now.strftime("%Y-%m-%d")
    doc_id = metric_doc_id(day, metric_type, metric_name)
    defaults: Dict[str, Any] = {
        "date": day,
        "metric_type": metric_type,
        "metric_name": metric_name,
        "updated_at": now,
    }
    if metadata:
        defaults["metadata"] = metadata
    try:
        store.increment(ANALYTICS_COLLECTION, doc_id, "value", delta, defaults=defaults)
    except StoreError:
        logger.exception("Failed to record metric %s", doc_id)


def list_metrics(store: DocumentStore, days: int, metric_type: Optional[str] = None) -> List[Dict[str, Any]]:
    since = (utcnow() - timedelta(days=days - 1)).strftime("%Y-%m-%d")
    filters: List[Any] = [("date", ">=", since)]
    if metric_type:
        filters.append(("metric_type", "==", metric_type))
    rows = store.query(ANALYTICS_COLLECTION, filters, order_by="date", descending=True)
    return [
        {
            "id": r["id"],
            "date": r.get("date"),
            "metric_type": r.get("metric_type"),
            "metric_name": r.get("metric_name"),
            "value": r.get("value") or 0,
        }
        for r in rows
    ]
