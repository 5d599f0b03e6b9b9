from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.base import PyObjectId, _utcnow
from pharmacy.models.ledger import LedgerRecord


class PaymentType(str, Enum):
    CASH = "CASH"
    CREDIT = "CREDIT"
    CARD = "CARD"
    UPI = "UPI"
    INSURANCE = "INSURANCE"


# Embedded documents don't need MongoModel (no separate _id)
class SaleItem(BaseModel):
    medicine_id: PyObjectId
    quantity: int
    price_cents: int
    subtotal_cents: int


class Sale(LedgerRecord):
    customer: str
    customer_phone: Optional[str] = None
    items: List[SaleItem]
    total_amount_cents: int
    discount_cents: int = 0
    final_amount_cents: int
    payment_type: PaymentType = PaymentType.CASH
    date: datetime = Field(default_factory=_utcnow)
    created_by: PyObjectId

    prescription_image_path: Optional[str] = None
    prescription_original_filename: Optional[str] = None

    @property
    def reference_total_cents(self) -> int:
        return self.final_amount_cents
