# backend/tests/test_staff.py
from __future__ import annotations

from datetime import datetime, timezone

from conftest import STAFF, USER


def test_worktray_counts_pending_requests_for_parish(client):
    for name in ("Ana", "Ben"):
        client.post("/api/requests/", json={"request_type": "baptism", "requester_name": name}, headers=USER)
    client.post(
        "/api/requests/",
        json={"request_type": "baptism", "requester_name": "Cara", "parish_id": "san_roque"},
        headers=USER,
    )
    done = client.post("/api/requests/", json={"request_type": "death", "requester_name": "Dan"}, headers=USER)
    client.put(f"/api/requests/{done.json()['request_id']}", json={"status": "approved"}, headers=STAFF)

    r = client.get("/api/staff/worktray", headers=STAFF)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["parish_id"] == "default_parish"
    assert body["pending_requests"] == 2
    assert body["schedule_today"] == []

    r = client.get("/api/staff/worktray?parish_id=san_roque", headers=STAFF)
    assert r.json()["pending_requests"] == 1


def test_worktray_lists_todays_events(client):
    now = datetime.now(timezone.utc).isoformat()
    ev = client.post("/api/events/", json={"title": "Noon Mass", "starts_at": now}, headers=STAFF).json()

    r = client.get("/api/staff/worktray", headers=STAFF)
    assert [row["id"] for row in r.json()["schedule_today"]] == [ev["id"]]


def test_worktray_is_staff_only(client):
    assert client.get("/api/staff/worktray", headers=USER).status_code == 403
