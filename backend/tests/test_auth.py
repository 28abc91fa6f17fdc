# backend/tests/test_auth.py
from __future__ import annotations

from parish_records import auth as auth_mod
from parish_records import firebase
from parish_records.storage import StoreError

from conftest import ADMIN, STAFF, TOKENS, USER, auth


def test_missing_token_is_401(client):
    r = client.get("/api/records/")
    assert r.status_code == 401, r.text
    assert "Bearer" in r.json()["detail"]


def test_non_bearer_scheme_is_401(client):
    r = client.get("/api/records/", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_invalid_token_is_401(client):
    r = client.get("/api/records/", headers=auth("nope"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid Firebase token"


def test_plain_user_can_read_but_not_write(client):
    assert client.get("/api/records/", headers=USER).status_code == 200
    r = client.post("/api/records/", json={"type": "baptism", "text": "X"}, headers=USER)
    assert r.status_code == 403


def test_staff_cannot_delete_records(client):
    r = client.post("/api/records/", json={"type": "baptism", "text": "X"}, headers=STAFF)
    assert r.status_code == 201, r.text
    rid = r.json()["recordId"]
    assert client.delete(f"/api/records/{rid}", headers=STAFF).status_code == 403
    assert client.delete(f"/api/records/{rid}", headers=ADMIN).status_code == 200


def test_admin_claim_grants_admin_without_profile_role(client):
    # no users row for this uid, the admin claim decides
    r = client.get("/api/admin/settings", headers=auth("claim-admin-token"))
    assert r.status_code == 200, r.text


def test_role_lookup_falls_back_to_claims_when_store_fails(client, store, monkeypatch):
    def _boom(collection, doc_id):
        raise StoreError("down")

    auth_mod.clear_role_cache()
    monkeypatch.setattr(store, "get", _boom)
    principal = auth_mod.get_current_user(store=store, authorization="Bearer claim-admin-token")
    assert principal.role == "admin"
    assert principal.is_admin

    principal = auth_mod.get_current_user(store=store, authorization="Bearer user-token")
    assert principal.role is None
    assert not principal.is_staff


def test_role_is_cached(client, store):
    assert client.get("/api/admin/settings", headers=USER).status_code == 403
    store.set("users", "user-1", {"role": "admin"}, merge=True)
    # cached role still applies until invalidated
    assert client.get("/api/admin/settings", headers=USER).status_code == 403
    auth_mod.invalidate_role("user-1")
    assert client.get("/api/admin/settings", headers=USER).status_code == 200


def test_dev_mode_returns_dev_admin(client, dev_mode):
    r = client.get("/api/admin/settings")
    assert r.status_code == 200, r.text
    r = client.post("/api/records/", json={"type": "marriage", "text": "Dev Couple"})
    assert r.status_code == 201, r.text


def test_stored_role_overrides_stale_admin_claim(client):
    # user-1 is stored as "user"; the token still carries admin: true
    r = client.get("/api/admin/settings", headers=auth("stale-admin-token"))
    assert r.status_code == 403, r.text
    assert client.get("/api/records/", headers=auth("stale-admin-token")).status_code == 200


def test_role_cache_expires_after_ttl(store, monkeypatch):
    monkeypatch.setattr(firebase, "verify_id_token", lambda token: dict(TOKENS[token]))
    clock = [1000.0]
    monkeypatch.setattr(auth_mod.time, "monotonic", lambda: clock[0])
    auth_mod.clear_role_cache()

    def _role():
        return auth_mod.get_current_user(store=store, authorization="Bearer user-token").role

    assert _role() == "user"
    store.set("users", "user-1", {"role": "admin"}, merge=True)

    clock[0] += auth_mod.ROLE_CACHE_TTL_SECONDS - 1
    assert _role() == "user"

    clock[0] += 2
    assert _role() == "admin"
