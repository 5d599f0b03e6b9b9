from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import Field, computed_field

from pharmacy.models.base import PyObjectId
from pharmacy.models.ledger import LedgerRecord, PaymentHistoryEntry


class Currency(str, Enum):
    NPR = "NPR"
    INR = "INR"


class PriceUnit(str, Enum):
    PIECE = "piece"
    BOX = "box"
    STRIP = "strip"
    BOTTLE = "bottle"
    PACK = "pack"


class Storage(str, Enum):
    COLD = "cold"
    EXTREME_COLD = "extreme_cold"
    HOT = "hot"
    EXTREME_HOT = "extreme_hot"


def calculate_profit_margin(price_cents: int, purchase_price_cents: int) -> Optional[float]:
    """Margin over purchase price in percent, or None when nothing was paid for it."""
    if purchase_price_cents == 0:
        return None
    return round((price_cents - purchase_price_cents) / purchase_price_cents * 100, 2)


class Medicine(LedgerRecord):
    name: str
    composition: List[str]
    description: str = ""
    category: str
    price_cents: int
    currency: Currency = Currency.NPR
    price_unit: PriceUnit = PriceUnit.PIECE
    stock: int
    expiry_date: datetime
    manufacturer: str
    batch_number: str
    requires_prescription: bool = False
    storage: Storage
    vendor_id: PyObjectId
    purchase_price_cents: int
    is_archived: bool = False

    payment_history: List[PaymentHistoryEntry] = Field(default_factory=list)

    tracks_payment_history: ClassVar[bool] = True

    @property
    def reference_total_cents(self) -> int:
        return self.purchase_price_cents

    @computed_field
    @property
    def profit_margin(self) -> Optional[float]:
        return calculate_profit_margin(self.price_cents, self.purchase_price_cents)
