from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.sale import PaymentType


class SaleItemCreate(BaseModel):
    medicine_id: str
    quantity: int = Field(..., ge=1)
    price_cents: int = Field(..., ge=0)


class SaleCreate(BaseModel):
    customer: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    items: List[SaleItemCreate] = Field(..., min_length=1)
    discount_cents: int = Field(0, ge=0)
    payment_type: PaymentType = PaymentType.CASH
    # Only meaningful for CREDIT sales; everything else is paid in full
    paid_amount_cents: int = Field(0, ge=0)
