# backend/scripts/init_db.py
"""
Create the schema for the configured store backend and optionally seed sample data.

Usage (from backend/):
  python -m scripts.init_db                      # DB_BACKEND from env (.env)
  python -m scripts.init_db --backend cassandra --seed
  python -m scripts.init_db --backend sql --seed

Notes:
- SQL deployments normally run ``alembic upgrade head``; this script uses
  ``create_all`` which is handy for local SQLite.
- Seeding is idempotent: sample records use fixed ids.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List

HERE = Path(__file__).resolve()
BACKEND_ROOT = HERE.parents[1]  # .../backend
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from parish_records.db import build_store  # noqa: E402
from parish_records.schemas.records import RecordCreate  # noqa: E402
from parish_records.services import admin as admin_svc  # noqa: E402
from parish_records.services import records as records_svc  # noqa: E402
from parish_records.storage import DocumentStore, utcnow  # noqa: E402

SAMPLE_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "sample-baptism-2024-001",
        "type": "baptism",
        "text": "John Michael Smith",
        "date": "2024-01-15",
        "place": "Holy Rosary Parish",
        "details": {
            "registry_number": "2024-001-B",
            "name": "John Michael Smith",
            "gender": "male",
            "date_of_birth": "2023-11-20",
            "father_name": "Robert Smith",
            "mother_name": "Mary Smith",
            "godfather_name": "Peter Jones",
            "godmother_name": "Anna Jones",
            "date_of_baptism": "2024-01-15",
            "place": "Holy Rosary Parish",
            "minister_name": "Fr. Thomas Reyes",
        },
    },
    {
        "id": "sample-marriage-2024-001",
        "type": "marriage",
        "text": "David Johnson and Lisa Brown",
        "date": "2024-02-14",
        "details": {
            "registry_number": "2024-001-M",
            "date": "2024-02-14",
            "place": "Holy Rosary Parish",
            "officiant_name": "Fr. Thomas Reyes",
            "groom_name": "David Johnson",
            "bride_name": "Lisa Brown",
            "witness1_name": "Mark Lee",
            "witness2_name": "Grace Tan",
        },
    },
    {
        "id": "sample-confirmation-2024-001",
        "type": "confirmation",
        "text": "Emily Rose Garcia",
        "date": "2024-03-10",
        "details": {
            "registry_number": "2024-001-C",
            "name": "Emily Rose Garcia",
            "sponsor_name": "Carmen Garcia",
            "date": "2024-03-10",
            "place": "Holy Rosary Parish",
            "minister_name": "Bishop Antonio Cruz",
        },
    },
]

SEED_ADMIN = {"id": "seed-admin", "email": "admin@holyrosary.com", "display_name": "Parish Admin", "role": "admin"}


def seed(store: DocumentStore) -> int:
    created = 0
    for sample in SAMPLE_RECORDS:
        if store.get(records_svc.RECORDS, sample["id"]):
            continue
        records_svc.create_record(store, RecordCreate(**sample), uid="seed", email=SEED_ADMIN["email"])
        created += 1

    if store.get("users", SEED_ADMIN["id"]) is None:
        store.create("users", {**SEED_ADMIN, "created_at": utcnow()}, doc_id=SEED_ADMIN["id"])
    if store.get(admin_svc.SETTINGS, admin_svc.GLOBAL_SETTINGS_ID) is None:
        admin_svc.save_settings(store, {}, uid="seed")
    return created


def main() -> int:
    ap = argparse.ArgumentParser(description="Create the parish records schema (and sample data).")
    ap.add_argument("--backend", choices=["sql", "cassandra", "firestore"], help="Override DB_BACKEND")
    ap.add_argument("--seed", action="store_true", help="Insert sample records, an admin user and default settings")
    args = ap.parse_args()

    store = build_store(args.backend)
    try:
        store.create_schema()
        print(f"✅ Schema ready on backend={store.backend}")
        if args.seed:
            created = seed(store)
            print(f"🌱 Seeded {created} sample record(s)")
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
