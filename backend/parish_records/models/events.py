# backend/parish_records/models/events.py
"""Parish calendar events and the bookings attached to them."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parish_records.db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    parish_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="scheduled")
    created_by_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Event id={self.id} title={self.title!r} starts_at={self.starts_at}>"


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    requester_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    requester_contact: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    requester_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="pending")
    notes: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    assigned_staff: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
