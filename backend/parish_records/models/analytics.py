# backend/parish_records/models/analytics.py
"""Daily counters, admin settings and correction tickets."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parish_records.db import Base


class AnalyticsMetric(Base):
    __tablename__ = "analytics"

    # "<YYYY-MM-DD>_<metric_type>_<metric_name>"
    id: Mapped[str] = mapped_column(String(250), primary_key=True)
    date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    metric_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    metric_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    value: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    metadata_: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class AppSetting(Base):
    __tablename__ = "settings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # "global"
    language: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notify: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    auto_backup: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)


class CorrectionTicket(Base):
    __tablename__ = "correction_tickets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    message: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="open")
    created_by_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
