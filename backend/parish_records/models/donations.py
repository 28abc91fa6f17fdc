# backend/parish_records/models/donations.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parish_records.db import Base


class Donation(Base):
    __tablename__ = "donations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    donor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    donor_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="cash")
    campaign: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    reconciled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reconciled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reconciled_by: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
