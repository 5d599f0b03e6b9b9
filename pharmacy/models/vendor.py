from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from pharmacy.models.base import MongoModel, PyObjectId, _utcnow
from pharmacy.models.ledger import LedgerRecord


class Vendor(MongoModel):
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    is_active: bool = True


class TransactionType(str, Enum):
    PURCHASE = "PURCHASE"
    PAYMENT = "PAYMENT"


class VendorTransaction(LedgerRecord):
    vendor_id: PyObjectId
    medicine: str
    transaction_type: TransactionType
    amount_cents: int
    notes: Optional[str] = None
    date: datetime = Field(default_factory=_utcnow)

    @property
    def reference_total_cents(self) -> int:
        return self.amount_cents
