from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.medicine import Currency, Medicine, PriceUnit, Storage


class MedicineCreate(BaseModel):
    name: str = Field(..., min_length=1)
    composition: List[str]
    description: str = ""
    category: str = Field(..., min_length=1)
    price_cents: int
    currency: Currency = Currency.NPR
    price_unit: PriceUnit = PriceUnit.PIECE
    stock: int
    expiry_date: datetime
    manufacturer: str = Field(..., min_length=1)
    batch_number: str = Field(..., min_length=1)
    requires_prescription: bool = False
    storage: Storage
    vendor_id: str
    purchase_price_cents: int
    payment_status: PaymentStatus = PaymentStatus.DUE
    paid_amount_cents: Optional[int] = None


class MedicineUpdate(BaseModel):
    """Partial update. Payment fields go through the payment endpoint instead."""
    name: Optional[str] = Field(None, min_length=1)
    composition: Optional[List[str]] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    price_cents: Optional[int] = None
    currency: Optional[Currency] = None
    price_unit: Optional[PriceUnit] = None
    stock: Optional[int] = None
    expiry_date: Optional[datetime] = None
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = None
    requires_prescription: Optional[bool] = None
    storage: Optional[Storage] = None
    vendor_id: Optional[str] = None


class MedicineListResponse(BaseModel):
    medicines: List[Medicine]
    total: int
    total_pages: int
    current_page: int
    categories: List[str]
