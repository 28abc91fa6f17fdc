# backend/scripts/promote_admin_by_email.py
"""
Grant the admin role to an existing Firebase Auth user.

Sets the ``admin`` custom claim and merges ``role: admin`` into users/{uid}.

Usage (from backend/):
  python -m scripts.promote_admin_by_email someone@parish.org
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

HERE = Path(__file__).resolve()
BACKEND_ROOT = HERE.parents[1]  # .../backend
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from firebase_admin import auth  # noqa: E402

from parish_records import firebase  # noqa: E402
from parish_records.db import build_store  # noqa: E402
from parish_records.services import users as users_svc  # noqa: E402
from parish_records.storage import utcnow  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Promote a Firebase user to admin by email.")
    ap.add_argument("email", nargs="?", default="admin@gmail.com")
    args = ap.parse_args()

    try:
        user = firebase.get_user_by_email(args.email)
    except auth.UserNotFoundError:
        print(f"❌ No Firebase user with email {args.email}")
        return 1

    firebase.set_admin_claim(user.uid, True)

    store = build_store()
    try:
        store.set(
            users_svc.USERS,
            user.uid,
            {"email": user.email, "display_name": user.display_name, "role": "admin", "updated_at": utcnow()},
            merge=True,
        )
    finally:
        store.close()

    print(f"✅ {args.email} (uid={user.uid}) is now an admin")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
