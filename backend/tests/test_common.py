# backend/tests/test_common.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from parish_records.services.analytics import metric_doc_id, record_metric
from parish_records.services.common import clamp_limit, fmt_date, norm_type, parse_datetime, to_iso
from parish_records.storage import StoreError
from parish_records.storage.base import matches, sort_documents


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "baptism"), ("", "baptism"), (" Marriage ", "marriage"), ("FUNERAL", "death"), ("death", "death")],
)
def test_norm_type(raw, expected):
    assert norm_type(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 50), ("abc", 50), ("0", 50), ("-3", 50), ("25", 25), ("9999", 200), (10, 10)],
)
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw, 50, 200) == expected


def test_parse_datetime_variants():
    aware = parse_datetime("2024-01-15T08:00:00+08:00")
    assert aware == datetime(2024, 1, 15, 0, 0, tzinfo=timezone.utc)
    assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_datetime(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert parse_datetime("not a date") is None
    assert parse_datetime("") is None


def test_to_iso_and_fmt_date():
    assert to_iso(datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)) == "2024-01-15T08:00:00.000Z"
    assert to_iso(None) is None
    assert to_iso("free text") == "free text"
    assert fmt_date("2024-01-15") == "2024-01-15"
    assert fmt_date("sometime in May") == "sometime in May"
    assert fmt_date(None) is None


def test_matches_and_sort_documents():
    now = datetime.now(timezone.utc)
    docs = [
        {"id": "a", "n": 3, "at": now},
        {"id": "b", "n": None, "at": now - timedelta(days=1)},
        {"id": "c", "n": 1, "at": now - timedelta(days=2)},
    ]
    assert [d["id"] for d in docs if matches(d, [("n", ">=", 2)])] == ["a"]
    assert [d["id"] for d in docs if matches(d, [("n", "==", None)])] == ["b"]
    assert [d["id"] for d in sort_documents(list(docs), "n", descending=False)] == ["c", "a", "b"]
    assert [d["id"] for d in sort_documents(list(docs), "n", descending=True)] == ["a", "c", "b"]


def test_metric_doc_id_is_sanitized():
    assert metric_doc_id("2024-01-15", "records", "baptism created/x") == "2024-01-15_records_baptism_created_x"
    assert len(metric_doc_id("2024-01-15", "t", "n" * 400)) == 250


def test_record_metric_swallows_store_errors(store, monkeypatch):
    def _fail(*args, **kwargs):
        raise StoreError("down")

    monkeypatch.setattr(store, "increment", _fail)
    record_metric(store, "records", "baptism_created")


def test_record_metric_accumulates(store):
    record_metric(store, "requests", "certificate_baptism_created")
    record_metric(store, "requests", "certificate_baptism_created", 2)
    rows = store.query("analytics", [("metric_type", "==", "requests")])
    assert len(rows) == 1
    assert rows[0]["value"] == 3
