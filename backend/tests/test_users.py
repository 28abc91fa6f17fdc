# backend/tests/test_users.py
from __future__ import annotations

import base64
import json

from parish_records import firebase
from parish_records.services.audit import AuditAction

from conftest import ADMIN, OTHER, STAFF, USER, create_record


def test_list_users_admin_only(client):
    assert client.get("/api/users/", headers=STAFF).status_code == 403
    r = client.get("/api/users/", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 5

    r = client.get("/api/users/?role=USER", headers=ADMIN)
    assert {row["id"] for row in r.json()["rows"]} == {"user-1", "user-2"}


def test_stats_overview(client):
    r = client.get("/api/users/stats/overview", headers=ADMIN)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_users"] == 5
    assert body["admin_users"] == 1
    assert body["staff_users"] == 1


def test_profile_self_or_staff(client):
    r = client.get("/api/users/user-1", headers=USER)
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "user"
    assert r.json()["household"] == []

    assert client.get("/api/users/user-1", headers=OTHER).status_code == 403
    assert client.get("/api/users/user-1", headers=STAFF).status_code == 200
    assert client.get("/api/users/ghost", headers=STAFF).status_code == 404


def test_update_profile_records_consent(client, store):
    r = client.put(
        "/api/users/user-1",
        json={"displayName": "Ana", "phone": "0917", "household": [{"name": "Ben"}], "privacyConsent": True},
        headers={**USER, "User-Agent": "pytest", "X-Forwarded-For": "10.0.0.9, 10.0.0.1"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["display_name"] == "Ana"
    assert body["household"] == [{"name": "Ben"}]
    assert body["privacy_consent"] is True
    assert body["privacy_consent_at"] is not None

    consents = store.query("privacy_consent_logs", [("user_id", "==", "user-1")])
    assert len(consents) == 1
    assert consents[0]["consent"] is True
    assert consents[0]["ip_address"] == "10.0.0.9"
    assert consents[0]["user_agent"] == "pytest"


def test_update_profile_validation(client):
    assert client.put("/api/users/user-1", json={}, headers=USER).status_code == 400
    assert client.put("/api/users/user-1", json={"phone": "1"}, headers=OTHER).status_code == 403
    too_many = [{"name": str(i)} for i in range(21)]
    assert client.put("/api/users/user-1", json={"household": too_many}, headers=USER).status_code == 422


def test_update_profile_creates_missing_row(client, store):
    r = client.put("/api/users/fresh", json={"phone": "123"}, headers=STAFF)
    assert r.status_code == 200, r.text
    doc = store.get("users", "fresh")
    assert doc["phone"] == "123"
    assert doc["created_at"] is not None


def test_delete_user_removes_profile_and_auth(client, store, monkeypatch):
    deleted = []
    monkeypatch.setattr(firebase, "delete_auth_user", deleted.append)

    assert client.delete("/api/users/user-2", headers=STAFF).status_code == 403
    r = client.delete("/api/users/user-2", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert deleted == ["user-2"]
    assert store.get("users", "user-2") is None
    assert client.delete("/api/users/user-2", headers=ADMIN).status_code == 404


def test_delete_user_tolerates_missing_auth_account(client, store, monkeypatch):
    def _fail(uid):
        raise ValueError("no such user")

    monkeypatch.setattr(firebase, "delete_auth_user", _fail)
    assert client.delete("/api/users/user-2", headers=ADMIN).status_code == 200
    assert store.get("users", "user-2") is None


def test_dashboard_lists_own_requests_bookings_and_records(client):
    mine = client.post("/api/requests/", json={"request_type": "baptism", "requester_name": "Ana"}, headers=USER)
    client.post("/api/requests/", json={"request_type": "baptism", "requester_name": "Ben"}, headers=OTHER)
    event = client.post(
        "/api/events/", json={"title": "Wedding", "starts_at": "2026-05-02T02:00:00Z"}, headers=STAFF
    ).json()
    booking = client.post(
        "/api/bookings/",
        json={"event_id": event["id"], "requester_name": "Ana", "requester_uid": "user-1"},
        headers=STAFF,
    ).json()
    rid = create_record(client, owner_uid="user-1")
    create_record(client, owner_uid="user-2")

    r = client.get("/api/users/user-1/dashboard", headers=USER)
    assert r.status_code == 200, r.text
    body = r.json()
    assert [row["request_id"] for row in body["requests"]] == [mine.json()["request_id"]]
    assert [row["id"] for row in body["appointments"]] == [booking["id"]]
    assert [row["id"] for row in body["sacraments"]] == [rid]
    assert body["sacraments"][0]["title"] == "John Michael Smith"

    assert client.get("/api/users/user-1/dashboard", headers=OTHER).status_code == 403
    assert client.get("/api/users/user-1/dashboard", headers=STAFF).status_code == 200


def test_export_user_data(client, store):
    req = client.post("/api/requests/", json={"request_type": "marriage", "requester_name": "Ana"}, headers=USER)

    r = client.post("/api/users/user-1/export", headers=USER)
    assert r.status_code == 200, r.text
    file = r.json()["file"]
    assert file["name"] == "user_export_user-1.json"
    assert file["mime"] == "application/json"
    prefix = "data:application/json;base64,"
    assert file["download_url"].startswith(prefix)
    exported = json.loads(base64.b64decode(file["download_url"][len(prefix):]))
    assert exported["user"]["id"] == "user-1"
    assert [d["id"] for d in exported["requests"]] == [req.json()["request_id"]]
    assert exported["generated_at"].endswith("Z")

    logs = store.query("audit_logs", [("action", "==", AuditAction.USER_DATA_EXPORTED.value)])
    assert [(l["resource_type"], l["resource_id"]) for l in logs] == [("user_export", "user-1")]

    assert client.post("/api/users/user-1/export", headers=OTHER).status_code == 403
    assert client.post("/api/users/ghost/export", headers=ADMIN).status_code == 404
