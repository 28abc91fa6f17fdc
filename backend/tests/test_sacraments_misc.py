# backend/tests/test_sacraments_misc.py
from __future__ import annotations

import json

import pytest

from parish_records.config import get_settings
from parish_records.services import email as email_svc

from conftest import OTHER, STAFF, USER, create_record


def test_owned_sacraments(client):
    mine = create_record(client, owner_uid="user-1")
    create_record(client, owner_uid="user-2")

    assert client.get("/api/sacraments/", headers=USER).status_code == 400
    r = client.get("/api/sacraments/?owner_id=user-1", headers=USER)
    assert r.status_code == 200, r.text
    assert [row["id"] for row in r.json()["rows"]] == [mine]

    assert client.get("/api/sacraments/?owner_id=user-1", headers=OTHER).status_code == 403
    assert client.get("/api/sacraments/?owner_id=user-1", headers=STAFF).status_code == 200


def test_correction_ticket(client, store):
    rid = create_record(client, owner_uid="user-1")

    assert client.post(f"/api/sacraments/{rid}/correction", json={"message": "x"}, headers=OTHER).status_code == 403
    r = client.post(f"/api/sacraments/{rid}/correction", json={"details": "Wrong birth date"}, headers=USER)
    assert r.status_code == 201, r.text
    ticket = store.get("correction_tickets", r.json()["ticket_id"])
    assert ticket["record_id"] == rid
    assert ticket["message"] == "Wrong birth date"
    assert ticket["status"] == "open"

    assert client.post("/api/sacraments/missing/correction", json={"message": "x"}, headers=USER).status_code == 404


def test_client_audit_ingest(client, store):
    r = client.post(
        "/api/audit",
        json={"action": "Certificate Printed", "resourceType": "certificate", "resourceId": "c-1", "details": {"copies": 2}},
        headers=USER,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["ok"] is True
    doc = store.get("audit_logs", body["id"])
    assert doc["user_id"] == "user-1"
    assert json.loads(doc["new_values"]) == {"copies": 2}

    assert client.post("/api/audit", json={"action": "  "}, headers=USER).status_code == 400


@pytest.fixture
def emailjs(monkeypatch):
    monkeypatch.setenv("EMAILJS_SERVICE_ID", "svc")
    monkeypatch.setenv("EMAILJS_TEMPLATE_ID", "tpl")
    monkeypatch.setenv("EMAILJS_PUBLIC_KEY", "pub")
    monkeypatch.setenv("EMAILJS_PRIVATE_KEY", "priv")
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("EMAILJS_SERVICE_ID")
    monkeypatch.delenv("EMAILJS_TEMPLATE_ID")
    monkeypatch.delenv("EMAILJS_PUBLIC_KEY")
    monkeypatch.delenv("EMAILJS_PRIVATE_KEY")
    get_settings.cache_clear()


class _Resp:
    def __init__(self, status_code: int, text: str = "OK"):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def test_send_code_posts_to_emailjs(client, emailjs, monkeypatch):
    sent = {}

    def _post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return _Resp(200)

    monkeypatch.setattr(email_svc.requests, "post", _post)
    r = client.post("/api/auth/send-code", json={"email": "ana@parish.test", "code": "123456"}, headers=USER)
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True}

    assert sent["url"] == email_svc.EMAILJS_SEND_URL
    assert sent["json"]["service_id"] == "svc"
    assert sent["json"]["accessToken"] == "priv"
    params = sent["json"]["template_params"]
    assert params["to_email"] == "ana@parish.test"
    assert params["passcode"] == "123456"
    assert params["minutes_valid"] == 15


def test_send_code_failures(client, emailjs, monkeypatch):
    assert client.post("/api/auth/send-code", json={"email": "a@b.c"}, headers=USER).status_code == 400

    monkeypatch.setattr(email_svc.requests, "post", lambda *a, **kw: _Resp(400, "bad template"))
    r = client.post("/api/auth/send-code", json={"email": "a@b.c", "code": "1"}, headers=USER)
    assert r.status_code == 500


def test_send_code_without_configuration(client, monkeypatch):
    for name in ("EMAILJS_SERVICE_ID", "EMAILJS_TEMPLATE_ID", "EMAILJS_PUBLIC_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    r = client.post("/api/auth/send-code", json={"email": "a@b.c", "code": "1"}, headers=USER)
    assert r.status_code == 500
    get_settings.cache_clear()
