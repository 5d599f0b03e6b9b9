from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from pharmacy.models.base import PyObjectId
from pharmacy.models.ledger import LedgerRecord


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class OrderItem(BaseModel):
    medicine_id: Optional[PyObjectId] = None
    name: str
    quantity: int
    price_cents: int


class PurchaseOrder(LedgerRecord):
    order_number: str
    vendor_id: PyObjectId
    items: List[OrderItem]
    status: OrderStatus = OrderStatus.PENDING
    assignee_id: Optional[PyObjectId] = None
    total_amount_cents: int = 0

    @property
    def reference_total_cents(self) -> int:
        return self.total_amount_cents


def order_total_cents(items: List[OrderItem]) -> int:
    return sum(item.quantity * item.price_cents for item in items)
