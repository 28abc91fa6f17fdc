# backend/tests/test_requests.py
from __future__ import annotations

from parish_records.services.audit import AuditAction

from conftest import OTHER, STAFF, USER, create_record


def _create_request(client, headers=USER, **overrides) -> str:
    payload = {"request_type": "baptism", "requester_name": "Ana Santos"}
    payload.update(overrides)
    r = client.post("/api/requests/", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["ok"] is True
    return body["request_id"]


def test_create_request_writes_mirror_row(client, store):
    rid = create_record(client)
    req_id = _create_request(client, recordId=rid)

    doc = store.get("certificate_requests", req_id)
    assert doc["status"] == "pending"
    assert doc["record_id"] == rid
    assert doc["created_by_uid"] == "user-1"
    assert doc["parish_id"] == "default_parish"

    mirror = store.get("baptism_requests", req_id)
    assert mirror["status"] == "pending"
    assert mirror["requester_name"] == "Ana Santos"

    logs = store.query("audit_logs", [("resource_id", "==", req_id)])
    assert logs[0]["action"] == AuditAction.REQUEST_CREATED.value


def test_create_request_rejects_unknown_type(client):
    r = client.post("/api/requests/", json={"request_type": "ordination"}, headers=USER)
    assert r.status_code == 400


def test_list_requests_by_type_and_owner(client):
    a = _create_request(client)
    b = _create_request(client, request_type="marriage")
    c = _create_request(client, headers=OTHER, request_type="funeral")

    r = client.get("/api/requests/", headers=STAFF)
    assert r.status_code == 200, r.text
    assert [row["request_id"] for row in r.json()["rows"]] == [c, b, a]

    r = client.get("/api/requests/marriage", headers=STAFF)
    assert [row["request_id"] for row in r.json()["rows"]] == [b]
    r = client.get("/api/requests/death", headers=STAFF)
    assert [row["request_id"] for row in r.json()["rows"]] == [c]
    r = client.get("/api/requests/funeral", headers=STAFF)
    assert r.status_code == 200, r.text
    assert [row["request_id"] for row in r.json()["rows"]] == [c]

    r = client.get("/api/requests/?user_id=user-1", headers=USER)
    assert {row["request_id"] for row in r.json()["rows"]} == {a, b}
    # users may only filter on themselves
    assert client.get("/api/requests/?user_id=user-1", headers=OTHER).status_code == 403


def test_get_request_includes_timeline(client):
    req_id = _create_request(client)
    r = client.get(f"/api/requests/{req_id}", headers=USER)
    assert r.status_code == 200, r.text
    row = r.json()["row"]
    assert row["status"] == "pending"
    assert row["timeline"][0]["status"] == "submitted"
    assert row["timeline"][1] == {"status": "pending", "at": None}

    assert client.get(f"/api/requests/{req_id}", headers=OTHER).status_code == 403
    assert client.get(f"/api/requests/{req_id}", headers=STAFF).status_code == 200
    assert client.get("/api/requests/missing", headers=STAFF).status_code == 404


def test_staff_update_sets_processed_and_syncs_mirror(client, store):
    req_id = _create_request(client)

    assert client.put(f"/api/requests/{req_id}", json={"status": "approved"}, headers=USER).status_code == 403
    assert client.put(f"/api/requests/{req_id}", json={}, headers=STAFF).status_code == 400
    assert client.put(f"/api/requests/{req_id}", json={"status": "bogus"}, headers=STAFF).status_code == 422

    r = client.put(f"/api/requests/{req_id}", json={"status": "approved", "notification_sent": True}, headers=STAFF)
    assert r.status_code == 200, r.text
    row = r.json()["row"]
    assert row["status"] == "approved"
    assert row["processed_by"] == "staff@parish.test"
    assert row["processed_at"] is not None
    assert row["notification_sent"] is True

    assert store.get("baptism_requests", req_id)["status"] == "approved"
    logs = store.query("audit_logs", [("action", "==", AuditAction.REQUEST_APPROVED.value)])
    assert len(logs) == 1


def test_update_missing_request_is_404(client):
    assert client.put("/api/requests/missing", json={"status": "ready"}, headers=STAFF).status_code == 404


def test_cancel_request(client, store):
    req_id = _create_request(client)
    assert client.post(f"/api/requests/{req_id}/cancel", headers=OTHER).status_code == 403

    r = client.post(f"/api/requests/{req_id}/cancel", headers=USER)
    assert r.status_code == 200, r.text
    doc = store.get("certificate_requests", req_id)
    assert doc["status"] == "cancelled"
    assert doc["cancelled_at"] is not None
    assert store.get("baptism_requests", req_id)["status"] == "cancelled"


def test_completed_request_cannot_be_cancelled(client):
    req_id = _create_request(client)
    client.put(f"/api/requests/{req_id}", json={"status": "ready"}, headers=STAFF)
    r = client.post(f"/api/requests/{req_id}/cancel", headers=USER)
    assert r.status_code == 400
