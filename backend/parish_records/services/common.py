# backend/parish_records/services/common.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

SACRAMENT_TYPES = ("baptism", "marriage", "confirmation", "death")


def norm_type(t: Optional[str], default: str = "baptism") -> str:
    """Return canonical lower-case sacrament type, mapping aliases (e.g. 'funeral' -> 'death')."""
    t = (t or "").strip().lower() or default
    if t == "funeral":
        return "death"
    return t


def detail_collection(t: str) -> str:
    return f"{norm_type(t)}_records"


def request_collection(t: str) -> str:
    return f"{norm_type(t)}_requests"


def clamp_limit(value: Any, default: int, maximum: int) -> int:
    """Parse a ``limit`` query value; bad or non-positive input falls back to the default."""
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    if n <= 0:
        return default
    return min(n, maximum)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates, epoch millis or ISO strings; return an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        try:
            dt = date_parser.isoparse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(value: Any) -> Optional[str]:
    """Render timestamps uniformly as ISO-8601 (``...Z``); None stays None."""
    if value is None:
        return None
    dt = parse_datetime(value)
    if dt is None:
        return str(value)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fmt_date(value: Any) -> Optional[str]:
    """Render a date-ish value as ``YYYY-MM-DD``; unparseable strings are returned unchanged."""
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    dt = parse_datetime(value)
    if dt is None:
        return str(value)
    # plain dates are parsed as midnight UTC, keep them on the same day
    return dt.strftime("%Y-%m-%d")
