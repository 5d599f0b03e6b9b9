from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.ledger import PaymentHistoryEntry, PaymentStatus


class PaymentStatusUpdate(BaseModel):
    """Explicit status change (medicines, vendor transactions)."""
    payment_status: PaymentStatus
    paid_amount_cents: Optional[int] = None


class PaymentAmountUpdate(BaseModel):
    """Absolute paid amount; the status is derived (purchase orders)."""
    paid_amount_cents: int = Field(..., ge=0)


class PaymentReceived(BaseModel):
    """Incremental payment against what is still due (sales)."""
    amount_cents: int = Field(..., gt=0)


class PaymentHistoryResponse(BaseModel):
    medicine_id: str
    name: str
    purchase_price_cents: int
    paid_amount_cents: int
    due_amount_cents: int
    payment_status: PaymentStatus
    history: List[PaymentHistoryEntry]
