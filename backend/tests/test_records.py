# backend/tests/test_records.py
from __future__ import annotations

import json

from parish_records.services.audit import AuditAction

from conftest import ADMIN, STAFF, USER, create_record


def test_create_record_writes_summary_details_and_notes(client, store):
    rid = create_record(client)

    summary = store.get("records", rid)
    assert summary["type"] == "baptism"
    assert summary["parish_id"] == "default_parish"
    assert summary["created_by_uid"] == "staff-1"
    assert summary["certificate_status"] == "pending"
    assert summary["registry_number"] == "2024-001-B"

    detail = store.get("baptism_records", rid)
    assert detail["father_name"] == "Robert Smith"
    assert detail["parish_id"] == "default_parish"

    notes = json.loads(summary["notes"])
    assert notes["child"]["fullName"] == "John Michael Smith"
    assert notes["registry"] == {"registryNo": "2024-001-B", "bookNo": "12", "pageNo": "34", "lineNo": "5"}
    assert notes["baptism"]["date"] == "2024-01-15"
    assert notes["metadata"]["recordId"] == rid


def test_create_record_logs_audit_and_metric(client, store):
    rid = create_record(client)
    logs = store.query("audit_logs", [("resource_id", "==", rid)])
    assert [l["action"] for l in logs] == [AuditAction.RECORD_ADDED.value]
    assert logs[0]["user_id"] == "staff-1"

    metrics = store.query("analytics", [("metric_name", "==", "baptism_created")])
    assert len(metrics) == 1
    assert metrics[0]["value"] == 1


def test_create_record_without_details_uses_defaults(client, store):
    r = client.post("/api/records/", json={"type": "confirmation"}, headers=STAFF)
    assert r.status_code == 201, r.text
    doc = store.get("records", r.json()["recordId"])
    assert doc["text"] == "Unnamed Record"
    assert doc["notes"] is None
    assert store.get("confirmation_records", doc["id"]) is None


def test_create_record_accepts_funeral_alias(client, store):
    rid = create_record(client, type="funeral", text="Juan Dela Cruz", details={"name": "Juan Dela Cruz", "date": "2024-05-02"})
    assert store.get("records", rid)["type"] == "death"
    assert store.get("death_records", rid)["name"] == "Juan Dela Cruz"


def test_create_record_rejects_unknown_type(client):
    r = client.post("/api/records/", json={"type": "ordination", "text": "X"}, headers=STAFF)
    assert r.status_code == 422


def test_explicit_notes_are_kept(client, store):
    rid = create_record(client, notes={"custom": True})
    assert json.loads(store.get("records", rid)["notes"]) == {"custom": True}


def test_list_records_newest_first_with_type_filter(client):
    first = create_record(client)
    second = create_record(client, type="marriage", text="David and Lisa", details={"groom_name": "David", "bride_name": "Lisa"})

    r = client.get("/api/records/", headers=USER)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["count"] == 2
    assert [row["id"] for row in body["rows"]] == [second, first]
    assert body["records"] == body["rows"]
    assert body["rows"][0]["created_at"].endswith("Z")

    r = client.get("/api/records/?type=marriage&limit=abc", headers=USER)
    assert [row["id"] for row in r.json()["rows"]] == [second]


def test_get_record_returns_detail_and_logs_view(client, store):
    rid = create_record(client)
    r = client.get(f"/api/records/{rid}", headers=USER)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["name"] == "John Michael Smith"
    assert body["parish"] == "default_parish"
    assert body["date"] == "2024-01-15"

    views = store.query("audit_logs", [("action", "==", AuditAction.RECORD_VIEWED.value)])
    assert len(views) == 1
    assert views[0]["resource_type"] == "baptism_record"


def test_get_missing_record_is_404(client):
    assert client.get("/api/records/nope", headers=USER).status_code == 404


def test_update_record_merges_details_and_rebuilds_notes(client, store):
    rid = create_record(client)
    r = client.put(
        f"/api/records/{rid}",
        json={"text": "John M. Smith", "details": {"name": "John M. Smith", "godmother_name": "Anna Jones"}},
        headers=STAFF,
    )
    assert r.status_code == 200, r.text

    summary = store.get("records", rid)
    assert summary["text"] == "John M. Smith"
    notes = json.loads(summary["notes"])
    assert notes["child"]["fullName"] == "John M. Smith"
    assert notes["godparents"]["godmother1"] == "Anna Jones"
    # untouched detail fields survive the merge
    assert notes["parents"]["father"] == "Robert Smith"

    logs = store.query("audit_logs", [("action", "==", AuditAction.RECORD_UPDATED.value)])
    assert json.loads(logs[0]["new_values"]) == {"text": "John M. Smith"}


def test_update_missing_record_is_404(client):
    assert client.put("/api/records/nope", json={"text": "x"}, headers=STAFF).status_code == 404


def test_certificate_status(client, store):
    rid = create_record(client)
    r = client.put(f"/api/records/{rid}/certificate-status", json={}, headers=STAFF)
    assert r.status_code == 400

    r = client.put(f"/api/records/{rid}/certificate-status", json={"status": "ready"}, headers=STAFF)
    assert r.status_code == 200, r.text
    assert r.json()["certificate_status"] == "ready"
    assert store.get("records", rid)["certificate_status"] == "ready"


def test_delete_is_soft_and_hides_record(client, store):
    rid = create_record(client)
    r = client.delete(f"/api/records/{rid}", headers=ADMIN)
    assert r.status_code == 200, r.text

    doc = store.get("records", rid)
    assert doc["deleted_at"] is not None
    assert doc["deleted_by"] == "admin@parish.test"
    assert client.get(f"/api/records/{rid}", headers=USER).status_code == 404
    assert client.get("/api/records/", headers=USER).json()["count"] == 0
    assert client.delete(f"/api/records/{rid}", headers=ADMIN).status_code == 404


def test_type_detail_listing(client):
    rid = create_record(client)
    r = client.get("/api/records/baptism/all", headers=STAFF)
    assert r.status_code == 200, r.text
    rows = r.json()["rows"]
    assert [row["id"] for row in rows] == [rid]
    assert rows[0]["registry_number"] == "2024-001-B"

    assert client.get("/api/records/ordination/all", headers=STAFF).status_code == 404
    assert client.get("/api/records/baptism/all", headers=USER).status_code == 403


def test_record_audits_name_the_record_type(client, store):
    rid = create_record(client, type="marriage", details={"groom_name": "Jose Cruz", "bride_name": "Maria Lim"})
    client.put(f"/api/records/{rid}", json={"text": "Cruz - Lim"}, headers=STAFF)
    client.put(f"/api/records/{rid}/certificate-status", json={"status": "ready"}, headers=STAFF)
    client.delete(f"/api/records/{rid}", headers=ADMIN)

    logs = store.query("audit_logs", [("resource_id", "==", rid)])
    assert len(logs) == 4
    assert {l["resource_type"] for l in logs} == {"marriage_record"}
