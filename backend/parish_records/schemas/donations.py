# backend/parish_records/schemas/donations.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class DonationCreate(BaseModel):
    amount: Optional[float] = None
    method: Optional[str] = None
    campaign: Optional[str] = None
    anonymous: bool = False
    donor_name: Optional[str] = None
    date: Optional[str] = None
    receipt_url: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
