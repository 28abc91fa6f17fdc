# backend/tests/test_admin.py
from __future__ import annotations

import json
from datetime import timedelta

from parish_records.services.audit import AuditAction
from parish_records.storage import utcnow

from conftest import ADMIN, STAFF, create_record


def test_admin_routes_reject_staff(client):
    for path in ("/api/admin/settings", "/api/admin/logs", "/api/admin/summary", "/api/admin/analytics"):
        assert client.get(path, headers=STAFF).status_code == 403, path


def test_settings_defaults_and_update(client, store):
    r = client.get("/api/admin/settings", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json() == {"language": "en", "timezone": "UTC", "notify": True, "auto_backup": False}

    r = client.put("/api/admin/settings", json={"language": "fil", "autoBackup": True}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["settings"]["language"] == "fil"
    assert r.json()["settings"]["auto_backup"] is True

    assert client.get("/api/admin/settings", headers=ADMIN).json()["timezone"] == "UTC"
    assert store.get("settings", "global")["updated_by"] == "admin-1"
    logs = store.query("audit_logs", [("action", "==", AuditAction.SETTINGS_UPDATED.value)])
    assert len(logs) == 1


def test_logs_list_create_delete(client, store):
    rid = create_record(client)

    r = client.post(
        "/api/admin/logs",
        json={"user_id": "legacy", "action": "Imported", "resource_type": "records", "new_values": {"n": 3}},
        headers=ADMIN,
    )
    assert r.status_code == 201, r.text
    log_id = r.json()["id"]
    assert json.loads(store.get("audit_logs", log_id)["new_values"]) == {"n": 3}
    assert client.post("/api/admin/logs", json={"action": "x"}, headers=ADMIN).status_code == 400

    r = client.get("/api/admin/logs", headers=ADMIN)
    assert r.status_code == 200, r.text
    rows = r.json()["rows"]
    assert rows[0]["id"] == log_id
    assert rows[0]["action_time"].endswith("Z")

    r = client.get(f"/api/admin/logs?resource_id={rid}", headers=ADMIN)
    rows = r.json()["rows"]
    assert [row["action"] for row in rows] == [AuditAction.RECORD_ADDED.value]
    assert rows[0]["details"].startswith(f"baptism_record #{rid} → {AuditAction.RECORD_ADDED.value}")

    assert client.delete(f"/api/admin/logs/{log_id}", headers=ADMIN).json() == {"ok": True}
    assert client.delete(f"/api/admin/logs/{log_id}", headers=ADMIN).status_code == 404


def test_old_logs_fall_outside_window(client, store):
    store.create(
        "audit_logs",
        {"user_id": "x", "action": "Old", "timestamp": utcnow() - timedelta(days=30)},
        doc_id="old-log",
    )
    ids = [row["id"] for row in client.get("/api/admin/logs?days=7", headers=ADMIN).json()["rows"]]
    assert "old-log" not in ids
    ids = [row["id"] for row in client.get("/api/admin/logs?days=60", headers=ADMIN).json()["rows"]]
    assert "old-log" in ids


def test_admin_records_list_update_delete(client, store):
    rid = create_record(client)

    r = client.get("/api/admin/records?user_id=staff-1", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["rows"][0]["created_by_uid"] == "staff-1"
    assert client.get("/api/admin/records?user_id=someone", headers=ADMIN).json()["count"] == 0

    r = client.get("/api/admin/records/recent?days=1", headers=ADMIN)
    assert [row["id"] for row in r.json()["rows"]] == [rid]

    assert client.put(f"/api/admin/records/{rid}", json={}, headers=ADMIN).status_code == 400
    r = client.put(f"/api/admin/records/{rid}", json={"source": "san_roque", "image_ref": "img/1.png"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["row"]["source"] == "san_roque"
    assert store.get("records", rid)["image_ref"] == "img/1.png"

    assert client.delete(f"/api/admin/records/{rid}", headers=ADMIN).json() == {"ok": True}
    assert store.get("records", rid)["deleted_reason"] == "Deleted via admin"
    assert client.put(f"/api/admin/records/{rid}", json={"text": "x"}, headers=ADMIN).status_code == 404


def test_summary_and_daily_totals(client):
    create_record(client)
    create_record(client, type="marriage", text="A and B", details={"groom_name": "A", "bride_name": "B"})

    r = client.get("/api/admin/summary", headers=ADMIN)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_records_last_days"] == 2
    assert body["records_by_type"] == {"baptism": 1, "marriage": 1}
    assert body["certificates_by_status"] == {"pending": 2}
    assert body["users_by_role"]["user"] == 2

    r = client.get("/api/admin/metrics/records/daily?days=3", headers=ADMIN)
    days = r.json()["days"]
    assert len(days) == 3
    assert days[-1] == {"date": utcnow().date().isoformat(), "total": 2}
    assert days[0]["total"] == 0


def test_analytics_lists_counters(client):
    create_record(client)
    create_record(client)
    r = client.get("/api/admin/analytics?metric_type=records", headers=ADMIN)
    assert r.status_code == 200, r.text
    rows = r.json()["rows"]
    assert len(rows) == 1
    assert rows[0]["metric_name"] == "baptism_created"
    assert rows[0]["value"] == 2


def test_users_health(client):
    assert client.get("/api/admin/users/health", headers=ADMIN).json() == {"ok": True}


def test_users_sync_upserts_auth_accounts(client, store, monkeypatch):
    from parish_records import firebase

    accounts = [
        {"id": "user-1", "email": "user@parish.test", "display_name": "User One", "email_verified": True,
         "disabled": False, "last_login_ms": 1_700_000_000_000, "is_admin": False},
        {"id": "new-admin", "email": "boss@parish.test", "display_name": "Boss", "email_verified": True,
         "disabled": False, "last_login_ms": None, "is_admin": True},
    ]
    monkeypatch.setattr(firebase, "iter_auth_users", lambda: iter(accounts))

    r = client.post("/api/admin/users/sync", headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json() == {"total": 2}

    existing = store.get("users", "user-1")
    assert existing["role"] == "user"
    assert existing["display_name"] == "User One"
    assert existing["last_login"] is not None
    assert store.get("users", "new-admin")["role"] == "admin"


def test_set_role_updates_store_and_claim(client, store, monkeypatch):
    from parish_records import firebase

    calls = []
    monkeypatch.setattr(firebase, "set_admin_claim", lambda uid, flag: calls.append((uid, flag)))

    assert client.patch("/api/admin/users/user-1/role", json={"role": "pope"}, headers=ADMIN).status_code == 400
    r = client.patch("/api/admin/users/user-1/role", json={"role": "Staff"}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "staff"
    assert store.get("users", "user-1")["role"] == "staff"
    assert calls == [("user-1", False)]
    # cached role was dropped, so the promotion applies immediately
    assert client.get("/api/records/baptism/all", headers={"Authorization": "Bearer user-token"}).status_code == 200


def test_set_status_disables_auth_user(client, store, monkeypatch):
    from parish_records import firebase

    calls = []
    monkeypatch.setattr(firebase, "set_user_disabled", lambda uid, disabled: calls.append((uid, disabled)))

    assert client.patch("/api/admin/users/user-1/status", json={"disabled": "yes"}, headers=ADMIN).status_code == 400
    r = client.patch("/api/admin/users/user-1/status", json={"disabled": True}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert calls == [("user-1", True)]
    assert store.get("users", "user-1")["disabled"] is True


def test_set_status_reports_auth_failure(client, monkeypatch):
    from parish_records import firebase

    def _fail(uid, disabled):
        raise RuntimeError("auth down")

    monkeypatch.setattr(firebase, "set_user_disabled", _fail)
    r = client.patch("/api/admin/users/user-1/status", json={"disabled": True}, headers=ADMIN)
    assert r.status_code == 502
