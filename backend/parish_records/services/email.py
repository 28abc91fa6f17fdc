# backend/parish_records/services/email.py
"""Verification-code emails through the EmailJS REST API."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

import requests

from parish_records.config import Settings, get_settings
from parish_records.storage import utcnow

logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
CODE_VALID_MINUTES = 15
APP_NAME = "ParishRecord"


class EmailNotConfigured(RuntimeError):
    pass


class EmailSendError(RuntimeError):
    pass


def build_payload(settings: Settings, to_email: str, code: str) -> Dict[str, Any]:
    expires = utcnow() + timedelta(minutes=CODE_VALID_MINUTES)
    payload: Dict[str, Any] = {
        "service_id": settings.emailjs_service_id,
        "template_id": settings.emailjs_template_id,
        "user_id": settings.emailjs_public_key,
        "template_params": {
            "email": to_email,
            "to_email": to_email,
            "code": code,
            "passcode": code,
            "time": expires.strftime("%Y-%m-%d %H:%M:%S UTC"),
            "minutes_valid": CODE_VALID_MINUTES,
            "app_name": APP_NAME,
            "from_name": settings.emailjs_from_name,
            "reply_to": settings.emailjs_reply_to or to_email,
        },
    }
    if settings.emailjs_private_key:
        payload["accessToken"] = settings.emailjs_private_key
    return payload


def send_verification_code(to_email: str, code: str, timeout: float = 10.0) -> None:
    """POST the code to EmailJS; raises on missing config or a non-2xx reply."""
    settings = get_settings()
    if not settings.emailjs_configured:
        raise EmailNotConfigured("EMAILJS_SERVICE_ID, EMAILJS_TEMPLATE_ID and EMAILJS_PUBLIC_KEY are required")

    try:
        resp = requests.post(EMAILJS_SEND_URL, json=build_payload(settings, to_email, code), timeout=timeout)
    except requests.RequestException as exc:
        raise EmailSendError(f"EmailJS request failed: {exc}") from exc
    if not resp.ok:
        raise EmailSendError(f"EmailJS responded {resp.status_code}: {resp.text[:200]}")
    logger.info("Verification code sent to %s", to_email)
