from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.purchase_order import OrderStatus


class OrderItemCreate(BaseModel):
    medicine_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price_cents: int = Field(..., ge=0)


class PurchaseOrderCreate(BaseModel):
    vendor_id: str
    items: List[OrderItemCreate] = Field(..., min_length=1)
    assignee_id: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderAssigneeUpdate(BaseModel):
    assignee_id: Optional[str] = None
