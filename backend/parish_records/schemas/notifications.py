# backend/parish_records/schemas/notifications.py
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NotificationCreate(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = Field(None, validation_alias=AliasChoices("body", "message"))
    user_id: Optional[str] = None
    type: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
