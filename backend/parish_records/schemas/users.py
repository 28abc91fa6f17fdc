# backend/parish_records/schemas/users.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UserProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, validation_alias=AliasChoices("display_name", "displayName"))
    phone: Optional[str] = None
    address: Optional[str] = None
    household: Optional[List[Dict[str, Any]]] = Field(None, max_length=20)
    privacy_consent: Optional[bool] = Field(None, validation_alias=AliasChoices("privacy_consent", "privacyConsent"))

    model_config = ConfigDict(extra="ignore")
