# backend/parish_records/auth.py
"""Firebase bearer-token authentication and role guards.

Every ``/api`` route depends on :func:`get_current_user`. The role comes from
``users/{uid}.role`` (cached for 60 s); when no role is stored (or the lookup
fails) the token's ``admin``/``isAdmin`` claims decide. ``AUTH_ENFORCE=false`` (dev only) skips
token checks and returns a dev admin principal.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Depends, Header, HTTPException, status

from parish_records import firebase
from parish_records.config import get_settings
from parish_records.db import get_db
from parish_records.storage import DocumentStore, StoreError

logger = logging.getLogger(__name__)

ROLE_CACHE_TTL_SECONDS = 60.0

_role_cache: Dict[str, Tuple[float, Optional[str]]] = {}
_role_cache_lock = threading.Lock()


@dataclass
class Principal:
    uid: str
    email: Optional[str] = None
    role: Optional[str] = None
    admin_claim: bool = False
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin" or self.admin_claim

    @property
    def is_staff(self) -> bool:
        return self.is_admin or self.role == "staff"

    @property
    def is_finance(self) -> bool:
        return self.is_admin or self.role == "finance"

    @property
    def actor(self) -> str:
        """Human-friendly identifier stored in processed_by/deleted_by style fields."""
        return self.email or self.uid


DEV_PRINCIPAL = Principal(uid="dev", email="dev@local", role="admin", admin_claim=True)


def clear_role_cache() -> None:
    with _role_cache_lock:
        _role_cache.clear()


def _lookup_role(store: DocumentStore, uid: str) -> Optional[str]:
    now = time.monotonic()
    with _role_cache_lock:
        cached = _role_cache.get(uid)
        if cached and now - cached[0] < ROLE_CACHE_TTL_SECONDS:
            return cached[1]

    doc = store.get("users", uid)
    role = ((doc or {}).get("role") or "").strip().lower() or None
    with _role_cache_lock:
        _role_cache[uid] = (now, role)
    return role


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    store: DocumentStore = Depends(get_db),
    authorization: Optional[str] = Header(default=None),
) -> Principal:
    """Resolve the calling Firebase user and their role."""
    if not get_settings().auth_enforce:
        return DEV_PRINCIPAL

    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization Bearer token")

    try:
        claims = firebase.verify_id_token(token)
    except Exception as exc:  # firebase-admin raises several unrelated error types
        logger.info("Token verification failed: %s", type(exc).__name__)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Firebase token")

    uid = claims.get("uid") or claims.get("user_id") or claims.get("sub")
    claim_admin = bool(claims.get("admin") or claims.get("isAdmin"))
    try:
        role = _lookup_role(store, uid)
    except StoreError:
        logger.warning("Role lookup failed for uid=%s; falling back to token claims", uid)
        role = None

    # claims only decide when no stored role was found
    admin_claim = claim_admin and role is None
    if admin_claim:
        role = "admin"

    return Principal(uid=uid, email=claims.get("email"), role=role, admin_claim=admin_claim, claims=claims)


def _guard(check: Callable[[Principal], bool], detail: str) -> Callable[..., Principal]:
    def _inner(user: Principal = Depends(get_current_user)) -> Principal:
        if not check(user):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return _inner


require_auth = get_current_user
require_staff = _guard(lambda u: u.is_staff, "Staff access required")
require_admin = _guard(lambda u: u.is_admin, "Admin access required")
require_finance = _guard(lambda u: u.is_finance, "Finance access required")


def ensure_self_or_staff(user: Principal, uid: str) -> None:
    if user.uid != uid and not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def invalidate_role(uid: str) -> None:
    with _role_cache_lock:
        _role_cache.pop(uid, None)
