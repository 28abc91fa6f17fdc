# backend/parish_records/models/records.py
"""Sacrament record tables.

``records`` holds one summary row per sacrament record. Each sacrament type
also keeps a detail row (same id) in its own table with the register fields.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parish_records.db import Base


class Record(Base):
    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    text: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    parish_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    image_ref: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    place: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    registry_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # JSON document rebuilt from the detail row (see services.record_notes)
    notes: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    certificate_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)

    owner_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    created_by_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    created_by_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # soft delete
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    deleted_reason: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Record id={self.id} type={self.type} text={self.text!r}>"


class _RegisterColumns:
    """Book/page/line location in the parish register, shared by every detail table."""

    parish_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    registry_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    book_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    page_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    line_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class BaptismRecord(_RegisterColumns, Base):
    __tablename__ = "baptism_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    date_of_birth: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    godfather_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    godmother_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    minister_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    date_of_baptism: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    time_of_baptism: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    place: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)


class MarriageRecord(_RegisterColumns, Base):
    __tablename__ = "marriage_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    place: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    officiant_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    groom_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    groom_age_or_dob: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    groom_civil_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    groom_religion: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    groom_address: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    bride_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    witness1_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    witness2_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)


class ConfirmationRecord(_RegisterColumns, Base):
    __tablename__ = "confirmation_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    age_or_dob: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    sponsor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    place: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    minister_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)


class DeathRecord(_RegisterColumns, Base):
    __tablename__ = "death_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    age_or_dob: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    date_of_birth: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)  # date of death
    place_of_death: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    cause_of_death: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    civil_status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    spouse_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    informant_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    informant_relation: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    burial_date: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    burial_place: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    minister_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
