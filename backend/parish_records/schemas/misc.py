# backend/parish_records/schemas/misc.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CorrectionCreate(BaseModel):
    message: Optional[str] = Field(None, validation_alias=AliasChoices("message", "details", "reason"))

    model_config = ConfigDict(extra="ignore")


class ClientAuditEvent(BaseModel):
    action: Optional[str] = None
    resource_type: Optional[str] = Field(None, validation_alias=AliasChoices("resource_type", "resourceType"))
    resource_id: Optional[str] = Field(None, validation_alias=AliasChoices("resource_id", "resourceId"))
    old_values: Any = Field(None, validation_alias=AliasChoices("old_values", "oldValues"))
    new_values: Any = Field(None, validation_alias=AliasChoices("new_values", "newValues", "details"))

    model_config = ConfigDict(extra="ignore")


class SendCodeRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
