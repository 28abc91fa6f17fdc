# backend/parish_records/models/requests.py
"""Certificate requests and their per-sacrament mirror tables."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from parish_records.db import Base


class _RequestColumns:
    parish_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    record_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    requester_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="pending")
    requested_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    notification_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class CertificateRequest(_RequestColumns, Base):
    __tablename__ = "certificate_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    request_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_by_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    created_by_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<CertificateRequest id={self.id} type={self.request_type} status={self.status}>"


class BaptismRequest(_RequestColumns, Base):
    __tablename__ = "baptism_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)


class MarriageRequest(_RequestColumns, Base):
    __tablename__ = "marriage_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)


class ConfirmationRequest(_RequestColumns, Base):
    __tablename__ = "confirmation_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)


class DeathRequest(_RequestColumns, Base):
    __tablename__ = "death_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
