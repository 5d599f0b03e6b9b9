from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.vendor import TransactionType


class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    is_active: bool = True


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    is_active: Optional[bool] = None


class TransactionCreate(BaseModel):
    medicine: str = Field(..., min_length=1)
    transaction_type: TransactionType
    amount_cents: int = Field(..., ge=0)
    payment_status: PaymentStatus
    paid_amount_cents: Optional[int] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None


class TransactionUpdate(BaseModel):
    medicine: Optional[str] = Field(None, min_length=1)
    transaction_type: Optional[TransactionType] = None
    amount_cents: Optional[int] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    paid_amount_cents: Optional[int] = None
    notes: Optional[str] = None
