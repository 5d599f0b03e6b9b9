from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from pharmacy.models.medicine import Medicine


class TotalResponse(BaseModel):
    total_cents: int


class CountResponse(BaseModel):
    count: int


class StatusTotals(BaseModel):
    count: int = 0
    total_reference_cents: int = 0
    total_paid_cents: int = 0
    total_due_cents: int = 0


class StatusSummary(BaseModel):
    by_status: Dict[str, StatusTotals]
    grand_total: StatusTotals


class CounterpartyBalance(BaseModel):
    key: str
    total_due_cents: int
    last_activity_date: Optional[datetime] = None
    count: int


class Creditor(BaseModel):
    """Customer with outstanding credit sales."""
    customer: str
    phone_number: str
    total_due_cents: int
    last_purchase_date: Optional[datetime] = None
    sales_count: int


class VendorPayable(BaseModel):
    vendor_id: str
    name: str
    total_due_cents: int
    last_transaction_date: Optional[datetime] = None
    transaction_count: int


class VendorDue(BaseModel):
    vendor_id: str
    name: str
    total_due_cents: int


class OrderPaymentSummary(BaseModel):
    total_amount_cents: int
    paid_amount_cents: int
    total_due_amount_cents: int
    partial_amount_cents: int
    vendors: List[VendorDue]


class VendorSummary(BaseModel):
    total: int
    active: int
    with_dues: int


class DailySales(BaseModel):
    day: date
    count: int = 0
    revenue_cents: int = 0


class ExpiryReport(BaseModel):
    expired: List[Medicine]
    expiring: List[Medicine]
    days: int
