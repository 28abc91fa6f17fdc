# backend/parish_records/schemas/events.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from parish_records.services.common import parse_datetime


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    parish_id: Optional[str] = None
    status: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    # naive times are read as UTC
    @field_validator("starts_at", "ends_at")
    @classmethod
    def _to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return parse_datetime(v)

    @model_validator(mode="after")
    def _check_window(self) -> "EventCreate":
        if self.ends_at is not None and self.ends_at < self.starts_at:
            raise ValueError("ends_at must be on or after starts_at")
        return self


class BookingCreate(BaseModel):
    event_id: str
    requester_name: str = Field(..., min_length=1, max_length=200)
    requester_contact: Optional[str] = Field(None, max_length=200)
    requester_uid: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
