"""
Ledger fields shared by every record that tracks money owed against a total.

Medicine (purchase price), Sale (final amount), VendorTransaction (amount)
and PurchaseOrder (order total) all carry the same four fields and expose
their total through ``reference_total_cents``.

Invariants (after any mutation through pharmacy.services.ledger):
- paid_amount_cents + due_amount_cents == reference_total_cents
- PAID    => paid == total, due == 0
- DUE     => paid == 0, due == total
- All amounts in integer minor units (paisa)
"""

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel

from pharmacy.models.base import MongoModel


class PaymentStatus(str, Enum):
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    DUE = "DUE"


class PaymentHistoryEntry(BaseModel):
    """One payment event. Appended, never edited."""
    amount_cents: int
    date: datetime
    status: PaymentStatus


class LedgerRecord(MongoModel):
    payment_status: PaymentStatus = PaymentStatus.DUE
    paid_amount_cents: int = 0
    due_amount_cents: int = 0
    last_payment_date: Optional[datetime] = None

    # Only medicines keep a payment history log
    tracks_payment_history: ClassVar[bool] = False

    @property
    def reference_total_cents(self) -> int:
        raise NotImplementedError

    def ledger_fields(self) -> dict:
        return {
            "payment_status": self.payment_status,
            "paid_amount_cents": self.paid_amount_cents,
            "due_amount_cents": self.due_amount_cents,
            "last_payment_date": self.last_payment_date,
        }
