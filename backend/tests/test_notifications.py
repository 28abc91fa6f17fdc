# backend/tests/test_notifications.py
from __future__ import annotations

from parish_records.storage import utcnow

from conftest import ADMIN, OTHER, STAFF, USER


def _notify(client, **payload) -> str:
    body = {"title": "Parish news", "body": "Mass at 7am"}
    body.update(payload)
    r = client.post("/api/notifications/", json=body, headers=ADMIN)
    assert r.status_code == 201, r.text
    return r.json()["id"]


def test_create_requires_admin_and_fields(client):
    assert client.post("/api/notifications/", json={"title": "t", "body": "b"}, headers=STAFF).status_code == 403
    assert client.post("/api/notifications/", json={"title": " ", "body": "b"}, headers=ADMIN).status_code == 400

    r = client.post("/api/notifications/", json={"title": "Hi", "message": "legacy field"}, headers=ADMIN)
    assert r.status_code == 201, r.text
    row = r.json()
    assert row["body"] == "legacy field"
    assert row["type"] == "normal"
    assert row["read"] is False


def test_user_sees_broadcasts_and_own_only(client):
    broadcast = _notify(client)
    mine = _notify(client, user_id="user-1", title="For you")
    _notify(client, user_id="user-2", title="Not yours")

    r = client.get("/api/notifications/", headers=USER)
    assert r.status_code == 200, r.text
    ids = [row["id"] for row in r.json()["rows"]]
    assert ids == [mine, broadcast]

    r = client.get("/api/notifications/", headers=ADMIN)
    assert r.json()["count"] == 3
    r = client.get("/api/notifications/?user_id=user-2", headers=ADMIN)
    assert r.json()["count"] == 1


def test_mark_read(client, store):
    nid = _notify(client, user_id="user-1")
    assert client.patch(f"/api/notifications/{nid}/read", json={"read": "yes"}, headers=USER).status_code == 400
    assert client.patch(f"/api/notifications/{nid}/read", json={"read": True}, headers=OTHER).status_code == 403

    r = client.patch(f"/api/notifications/{nid}/read", json={"read": True}, headers=USER)
    assert r.status_code == 200, r.text
    assert store.get("notifications", nid)["read"] is True
    assert client.patch("/api/notifications/missing/read", json={"read": True}, headers=USER).status_code == 404


def test_archive_sets_type(client, store):
    nid = _notify(client)
    assert client.patch(f"/api/notifications/{nid}/archive", json={"archived": True}, headers=USER).status_code == 403

    r = client.patch(f"/api/notifications/{nid}/archive", json={"archived": True}, headers=STAFF)
    assert r.status_code == 200, r.text
    doc = store.get("notifications", nid)
    assert doc["archived"] is True
    assert doc["type"] == "archived"

    client.patch(f"/api/notifications/{nid}/archive", json={"archived": False}, headers=STAFF)
    assert store.get("notifications", nid)["type"] == "normal"


def test_bulk_read_skips_missing_and_foreign(client, store):
    own = _notify(client, user_id="staff-1")
    broadcast = _notify(client)
    foreign = _notify(client, user_id="user-2")

    r = client.post(
        "/api/notifications/bulk/read",
        json={"ids": [own, broadcast, foreign, "missing"], "read": True},
        headers=STAFF,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True, "updated": 2}
    assert store.get("notifications", foreign)["read"] is False

    assert client.post("/api/notifications/bulk/read", json={"ids": [], "read": True}, headers=STAFF).status_code == 400
    assert client.post("/api/notifications/bulk/archive", json={"ids": [own]}, headers=STAFF).status_code == 400


def test_bulk_archive_as_admin(client, store):
    a = _notify(client, user_id="user-2")
    r = client.post("/api/notifications/bulk/archive", json={"ids": [a], "archived": True}, headers=ADMIN)
    assert r.json()["updated"] == 1
    assert store.get("notifications", a)["archived"] is True


def test_delete_returns_204(client, store):
    nid = _notify(client)
    assert client.delete(f"/api/notifications/{nid}", headers=STAFF).status_code == 403
    r = client.delete(f"/api/notifications/{nid}", headers=ADMIN)
    assert r.status_code == 204
    assert r.content == b""
    assert store.get("notifications", nid) is None
    assert client.delete(f"/api/notifications/{nid}", headers=ADMIN).status_code == 404


def test_bulk_read_caps_at_200_ids(client, store):
    now = utcnow()
    ids = [f"n{i:03d}" for i in range(201)]
    for nid in ids:
        store.create("notifications", {"title": "t", "body": "b", "user_id": None, "read": False,
                                       "archived": False, "type": "normal", "created_at": now}, doc_id=nid)

    r = client.post("/api/notifications/bulk/read", json={"ids": ids, "read": True}, headers=ADMIN)
    assert r.status_code == 200, r.text
    assert r.json()["updated"] == 200
    assert store.get("notifications", ids[199])["read"] is True
    assert store.get("notifications", ids[200])["read"] is False
