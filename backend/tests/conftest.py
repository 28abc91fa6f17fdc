# backend/tests/conftest.py
from __future__ import annotations

import os

# tests always run against a private in-memory store with token checks on
os.environ.setdefault("DB_BACKEND", "sql")
os.environ["AUTH_ENFORCE"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from parish_records import firebase  # noqa: E402
from parish_records.auth import clear_role_cache  # noqa: E402
from parish_records.config import get_settings  # noqa: E402
from parish_records.db import get_db  # noqa: E402
from parish_records.main import app  # noqa: E402
from parish_records.storage import utcnow  # noqa: E402
from parish_records.storage.sql import SqlDocumentStore  # noqa: E402

# token -> decoded claims returned by the patched verify_id_token
TOKENS = {
    "admin-token": {"uid": "admin-1", "email": "admin@parish.test"},
    "staff-token": {"uid": "staff-1", "email": "staff@parish.test"},
    "finance-token": {"uid": "finance-1", "email": "finance@parish.test"},
    "user-token": {"uid": "user-1", "email": "user@parish.test"},
    "other-token": {"uid": "user-2", "email": "other@parish.test"},
    "claim-admin-token": {"uid": "claim-admin", "email": "claims@parish.test", "admin": True},
    "stale-admin-token": {"uid": "user-1", "email": "user@parish.test", "admin": True},
}

ROLES = {
    "admin-1": "admin",
    "staff-1": "staff",
    "finance-1": "finance",
    "user-1": "user",
    "user-2": "user",
}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


ADMIN = auth("admin-token")
STAFF = auth("staff-token")
FINANCE = auth("finance-token")
USER = auth("user-token")
OTHER = auth("other-token")


@pytest.fixture
def store():
    s = SqlDocumentStore("sqlite://")
    s.create_schema()
    now = utcnow()
    for uid, role in ROLES.items():
        s.create("users", {"email": f"{uid}@parish.test", "role": role, "created_at": now}, doc_id=uid)
    yield s
    s.close()


@pytest.fixture
def client(store, monkeypatch):
    def _verify(token):
        if token not in TOKENS:
            raise ValueError("invalid token")
        return dict(TOKENS[token])

    monkeypatch.setattr(firebase, "verify_id_token", _verify)
    clear_role_cache()
    app.dependency_overrides[get_db] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    clear_role_cache()


@pytest.fixture
def dev_mode(monkeypatch):
    monkeypatch.setenv("AUTH_ENFORCE", "false")
    get_settings.cache_clear()
    yield
    monkeypatch.setenv("AUTH_ENFORCE", "true")
    get_settings.cache_clear()


def create_record(client, headers=STAFF, **overrides) -> str:
    payload = {
        "type": "baptism",
        "text": "John Michael Smith",
        "date": "2024-01-15",
        "details": {
            "registry_number": "2024-001-B",
            "book_number": "12",
            "page_number": "34",
            "line_number": "5",
            "name": "John Michael Smith",
            "date_of_birth": "2023-12-01",
            "father_name": "Robert Smith",
            "mother_name": "Mary Smith",
            "date_of_baptism": "2024-01-15",
            "place": "Holy Rosary Parish",
            "minister_name": "Fr. Thomas Reyes",
        },
    }
    payload.update(overrides)
    r = client.post("/api/records/", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["recordId"]
