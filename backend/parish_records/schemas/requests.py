# backend/parish_records/schemas/requests.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

RequestStatus = Literal["pending", "processing", "approved", "rejected", "ready", "printed", "released", "cancelled"]


class CertificateRequestCreate(BaseModel):
    parish_id: Optional[str] = None
    request_type: str = Field("baptism", validation_alias=AliasChoices("request_type", "requestType", "type"))
    requester_name: Optional[str] = Field(None, validation_alias=AliasChoices("requester_name", "requesterName"))
    record_id: Optional[str] = Field(None, validation_alias=AliasChoices("record_id", "recordId"))

    model_config = ConfigDict(extra="ignore")


class CertificateRequestUpdate(BaseModel):
    status: Optional[RequestStatus] = None
    notification_sent: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")
