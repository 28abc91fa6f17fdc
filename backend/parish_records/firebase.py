# backend/parish_records/firebase.py
"""Thin wrapper over firebase-admin: app bootstrap, token verification and Auth admin calls."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore

from parish_records.config import get_settings

logger = logging.getLogger(__name__)


def _credential():
    raw = get_settings().firebase_service_account_json
    if not raw:
        return credentials.ApplicationDefault()
    if raw.lstrip().startswith("{"):
        return credentials.Certificate(json.loads(raw))
    return credentials.Certificate(raw)  # path to the service-account file


def get_app() -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        settings = get_settings()
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
        app = firebase_admin.initialize_app(_credential(), options)
        logger.info("Firebase app initialized (project=%s)", settings.firebase_project_id or "default")
        return app


def firestore_client():
    return firestore.client(app=get_app())


def verify_id_token(token: str) -> Dict[str, Any]:
    return auth.verify_id_token(token, app=get_app())


def set_admin_claim(uid: str, is_admin: bool) -> None:
    user = auth.get_user(uid, app=get_app())
    claims = dict(user.custom_claims or {})
    claims["admin"] = bool(is_admin)
    auth.set_custom_user_claims(uid, claims, app=get_app())


def set_user_disabled(uid: str, disabled: bool) -> None:
    auth.update_user(uid, disabled=bool(disabled), app=get_app())


def delete_auth_user(uid: str) -> None:
    auth.delete_user(uid, app=get_app())


def get_user_by_email(email: str) -> auth.UserRecord:
    return auth.get_user_by_email(email, app=get_app())


def iter_auth_users() -> Iterator[Dict[str, Any]]:
    """Yield every Firebase Auth user as a plain dict (for the users-collection sync)."""
    for user in auth.list_users(app=get_app()).iterate_all():
        meta = user.user_metadata
        last_login: Optional[int] = meta.last_sign_in_timestamp if meta else None
        yield {
            "id": user.uid,
            "email": user.email,
            "display_name": user.display_name,
            "email_verified": bool(user.email_verified),
            "disabled": bool(user.disabled),
            "last_login_ms": last_login,
            "is_admin": bool((user.custom_claims or {}).get("admin")),
        }
