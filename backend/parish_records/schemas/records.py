# backend/parish_records/schemas/records.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from parish_records.services.common import SACRAMENT_TYPES, norm_type


# ─────────────────────────────────────────────────────────────────────────────
# Detail models (per-type register fields)
# ─────────────────────────────────────────────────────────────────────────────

class _DetailBase(BaseModel):
    registry_number: Optional[str] = None
    book_number: Optional[str] = None
    page_number: Optional[str] = None
    line_number: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BaptismDetails(_DetailBase):
    name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    place_of_birth: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    godfather_name: Optional[str] = None
    godmother_name: Optional[str] = None
    minister_name: Optional[str] = None
    date_of_baptism: Optional[str] = None
    time_of_baptism: Optional[str] = None
    place: Optional[str] = None
    date: Optional[str] = None


class MarriageDetails(_DetailBase):
    date: Optional[str] = None
    place: Optional[str] = None
    officiant_name: Optional[str] = None
    groom_name: Optional[str] = None
    groom_age_or_dob: Optional[str] = None
    groom_civil_status: Optional[str] = None
    groom_religion: Optional[str] = None
    groom_address: Optional[str] = None
    bride_name: Optional[str] = None
    witness1_name: Optional[str] = None
    witness2_name: Optional[str] = None
    remarks: Optional[str] = None


class ConfirmationDetails(_DetailBase):
    name: Optional[str] = None
    age_or_dob: Optional[str] = None
    place_of_birth: Optional[str] = None
    address: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    sponsor_name: Optional[str] = None
    date: Optional[str] = None
    place: Optional[str] = None
    minister_name: Optional[str] = None
    remarks: Optional[str] = None


class DeathDetails(_DetailBase):
    name: Optional[str] = None
    gender: Optional[str] = None
    age_or_dob: Optional[str] = None
    date_of_birth: Optional[str] = None
    date: Optional[str] = Field(None, description="Date of death")
    place_of_death: Optional[str] = None
    cause_of_death: Optional[str] = None
    civil_status: Optional[str] = None
    address: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
    informant_name: Optional[str] = None
    informant_relation: Optional[str] = None
    burial_date: Optional[str] = None
    burial_place: Optional[str] = None
    minister_name: Optional[str] = None


DETAIL_MODELS: Dict[str, Type[_DetailBase]] = {
    "baptism": BaptismDetails,
    "marriage": MarriageDetails,
    "confirmation": ConfirmationDetails,
    "death": DeathDetails,
}


def parse_details(record_type: str, details: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Validate ``details`` for ``record_type``; returns only the fields that were sent."""
    if details is None:
        return None
    model = DETAIL_MODELS[norm_type(record_type)]
    return model.model_validate(details).model_dump(exclude_unset=True)


# ─────────────────────────────────────────────────────────────────────────────
# Request bodies
# ─────────────────────────────────────────────────────────────────────────────

class RecordCreate(BaseModel):
    id: Optional[str] = None
    type: str = "baptism"
    text: Optional[str] = Field(None, validation_alias=AliasChoices("text", "name"))
    source: Optional[str] = Field(None, validation_alias=AliasChoices("source", "parish_id"))
    image_ref: Optional[str] = None
    notes: Optional[Union[str, Dict[str, Any]]] = None
    date: Optional[str] = None
    place: Optional[str] = None
    registry_number: Optional[str] = None
    certificate_status: Optional[str] = Field(
        None, validation_alias=AliasChoices("certificate_status", "certificateStatus")
    )
    owner_uid: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def _check_type_and_details(self) -> "RecordCreate":
        self.type = norm_type(self.type)
        if self.type not in SACRAMENT_TYPES:
            raise ValueError(f"type must be one of {', '.join(SACRAMENT_TYPES)}")
        self.details = parse_details(self.type, self.details)
        return self


class RecordUpdate(BaseModel):
    """Partial update: only fields present in the body are written."""

    text: Optional[str] = Field(None, validation_alias=AliasChoices("text", "name"))
    source: Optional[str] = Field(None, validation_alias=AliasChoices("source", "parish_id"))
    image_ref: Optional[str] = None
    notes: Optional[Union[str, Dict[str, Any]]] = None
    date: Optional[str] = None
    place: Optional[str] = None
    registry_number: Optional[str] = None
    certificate_status: Optional[str] = Field(
        None, validation_alias=AliasChoices("certificate_status", "certificateStatus")
    )
    owner_uid: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class CertificateStatusUpdate(BaseModel):
    status: Optional[str] = None


class RecordCreated(BaseModel):
    message: str
    recordId: str


# ─────────────────────────────────────────────────────────────────────────────
# Read models
# ─────────────────────────────────────────────────────────────────────────────

class RecordRow(BaseModel):
    id: str
    type: str
    text: Optional[str] = None
    image_ref: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    certificate_status: Optional[str] = None


class RecordList(BaseModel):
    rows: List[RecordRow]
    records: List[RecordRow]
    count: int


class RecordDetail(BaseModel):
    id: str
    type: str
    name: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[str] = None
    parish: Optional[str] = None
    place: Optional[str] = None
    certificate_status: Optional[str] = None
    created_at: Optional[str] = None
