# payout_service/schemas/organizer.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class BankDetailsUpdate(BaseModel):
    account_number: str = Field(..., pattern=r"^\d{10}$", description="10-digit NUBAN account number")
    bank_code: str = Field(..., min_length=3, max_length=10)


class BankAccountVerification(BaseModel):
    account_number: str
    bank_code: str
    account_name: str


class OrganizerBankProfile(BaseModel):
    user_id: str
    organization_name: Optional[str] = None
    bank_account: Optional[str] = None
    bank_code: Optional[str] = None
    account_name: Optional[str] = None
    bank_verified_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
