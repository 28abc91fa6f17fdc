# backend/parish_records/config.py
"""Runtime configuration read from the environment (and ``.env`` when present)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    db_backend: str = "sql"
    database_url: str = "sqlite:///./parish_records.db"
    sql_echo: bool = False

    cassandra_hosts: List[str] = field(default_factory=lambda: ["127.0.0.1"])
    cassandra_port: int = 9042
    cassandra_keyspace: str = "parish_records"
    cassandra_datacenter: str = "datacenter1"
    cassandra_username: Optional[str] = None
    cassandra_password: Optional[str] = None

    firebase_service_account_json: Optional[str] = None
    firebase_project_id: Optional[str] = None

    allowed_origins: List[str] = field(default_factory=list)
    parish_id_default: str = "default_parish"
    auth_enforce: bool = True
    timezone: str = "Asia/Manila"
    log_level: str = "INFO"

    emailjs_service_id: Optional[str] = None
    emailjs_template_id: Optional[str] = None
    emailjs_public_key: Optional[str] = None
    emailjs_private_key: Optional[str] = None
    emailjs_from_name: str = "Parish Office"
    emailjs_reply_to: Optional[str] = None

    @property
    def emailjs_configured(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)


@lru_cache()
def get_settings() -> Settings:
    """Build settings once per process; call ``get_settings.cache_clear()`` after changing env."""
    return Settings(
        db_backend=os.getenv("DB_BACKEND", "sql").strip().lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./parish_records.db"),
        sql_echo=_env_bool("SQL_ECHO", "false"),
        cassandra_hosts=_env_list("CASSANDRA_HOSTS") or ["127.0.0.1"],
        cassandra_port=int(os.getenv("CASSANDRA_PORT", "9042")),
        cassandra_keyspace=os.getenv("CASSANDRA_KEYSPACE", "parish_records"),
        cassandra_datacenter=os.getenv("CASSANDRA_DATACENTER", "datacenter1"),
        cassandra_username=os.getenv("CASSANDRA_USERNAME") or None,
        cassandra_password=os.getenv("CASSANDRA_PASSWORD") or None,
        firebase_service_account_json=os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON") or None,
        firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
        allowed_origins=_env_list("ALLOWED_ORIGINS"),
        parish_id_default=os.getenv("PARISH_ID_DEFAULT", "default_parish"),
        auth_enforce=_env_bool("AUTH_ENFORCE", "true"),
        timezone=os.getenv("TZ", "Asia/Manila"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        emailjs_service_id=os.getenv("EMAILJS_SERVICE_ID") or None,
        emailjs_template_id=os.getenv("EMAILJS_TEMPLATE_ID") or None,
        emailjs_public_key=os.getenv("EMAILJS_PUBLIC_KEY") or None,
        emailjs_private_key=os.getenv("EMAILJS_PRIVATE_KEY") or None,
        emailjs_from_name=os.getenv("EMAILJS_FROM_NAME", "Parish Office"),
        emailjs_reply_to=os.getenv("EMAILJS_REPLY_TO") or None,
    )
