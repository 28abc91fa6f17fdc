# backend/parish_records/schemas/admin.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SettingsUpdate(BaseModel):
    language: Optional[str] = None
    timezone: Optional[str] = None
    notify: Optional[bool] = None
    auto_backup: Optional[bool] = Field(None, validation_alias=AliasChoices("auto_backup", "autoBackup"))

    model_config = ConfigDict(extra="ignore")


class AuditLogCreate(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    action: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    old_values: Any = None
    new_values: Any = None
    timestamp: Optional[str] = Field(None, validation_alias=AliasChoices("timestamp", "action_time"))
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class AdminRecordUpdate(BaseModel):
    text: Optional[str] = None
    source: Optional[str] = None
    image_ref: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BackfillRequest(BaseModel):
    limit: Optional[Any] = None


class RoleUpdate(BaseModel):
    role: Optional[str] = None
