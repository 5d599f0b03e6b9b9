"""
Read-only summaries over ledger records.

Everything here works on already-loaded records and returns plain
pydantic models, so the same functions back the medicine, sales, vendor
and purchase-order dashboards. Sums are integer minor units, so totals
are exact.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from pharmacy.models.ledger import LedgerRecord, PaymentStatus
from pharmacy.models.medicine import Medicine
from pharmacy.models.purchase_order import PurchaseOrder
from pharmacy.models.sale import Sale
from pharmacy.schemas.report import (
    CounterpartyBalance,
    DailySales,
    ExpiryReport,
    OrderPaymentSummary,
    StatusSummary,
    StatusTotals,
    VendorDue,
)


def total_due(records: Iterable[LedgerRecord]) -> int:
    return sum(record.due_amount_cents for record in records)


def group_by_counterparty(
    records: Iterable[LedgerRecord],
    key_fn: Callable[[LedgerRecord], str],
    date_fn: Callable[[LedgerRecord], Optional[datetime]],
    only_outstanding: bool = True,
) -> List[CounterpartyBalance]:
    """
    Group records by counterparty (customer, vendor) and sum what is owed.

    Returns one balance per key, largest due first. With ``only_outstanding``
    keys whose total due is zero are dropped (creditors/payables views).
    """
    groups: Dict[str, CounterpartyBalance] = {}

    for record in records:
        key = key_fn(record)
        activity = date_fn(record)
        balance = groups.get(key)
        if balance is None:
            groups[key] = CounterpartyBalance(
                key=key,
                total_due_cents=record.due_amount_cents,
                last_activity_date=activity,
                count=1,
            )
            continue

        balance.total_due_cents += record.due_amount_cents
        balance.count += 1
        if activity is not None and (
            balance.last_activity_date is None or activity > balance.last_activity_date
        ):
            balance.last_activity_date = activity

    balances = list(groups.values())
    if only_outstanding:
        balances = [b for b in balances if b.total_due_cents > 0]
    balances.sort(key=lambda b: b.total_due_cents, reverse=True)
    return balances


def summary_by_status(records: Iterable[LedgerRecord]) -> StatusSummary:
    """Per-status count and amounts, plus a grand total summed across the groups."""
    by_status = {status: StatusTotals() for status in PaymentStatus}

    for record in records:
        totals = by_status[PaymentStatus(record.payment_status)]
        totals.count += 1
        totals.total_reference_cents += record.reference_total_cents
        totals.total_paid_cents += record.paid_amount_cents
        totals.total_due_cents += record.due_amount_cents

    grand_total = StatusTotals()
    for totals in by_status.values():
        grand_total.count += totals.count
        grand_total.total_reference_cents += totals.total_reference_cents
        grand_total.total_paid_cents += totals.total_paid_cents
        grand_total.total_due_cents += totals.total_due_cents

    return StatusSummary(
        by_status={status.value: totals for status, totals in by_status.items()},
        grand_total=grand_total,
    )


def creditor_key(sale: Sale) -> str:
    """Customers are identified by name and phone together."""
    return f"{sale.customer.strip()}|{sale.customer_phone or ''}"


def order_payment_summary(
    orders: Sequence[PurchaseOrder], vendor_names: Dict[str, str]
) -> OrderPaymentSummary:
    """Totals across purchase orders, with the outstanding amount per vendor."""
    statuses = summary_by_status(orders)
    partial_cents = sum(
        order.total_amount_cents
        for order in orders
        if order.payment_status == PaymentStatus.PARTIAL
    )

    dues = group_by_counterparty(
        orders,
        key_fn=lambda order: str(order.vendor_id),
        date_fn=lambda order: order.created_at,
        only_outstanding=False,
    )
    vendors = [
        VendorDue(
            vendor_id=balance.key,
            name=vendor_names.get(balance.key, "Unknown vendor"),
            total_due_cents=balance.total_due_cents,
        )
        for balance in dues
    ]

    return OrderPaymentSummary(
        total_amount_cents=statuses.grand_total.total_reference_cents,
        paid_amount_cents=statuses.grand_total.total_paid_cents,
        total_due_amount_cents=statuses.grand_total.total_due_cents,
        partial_amount_cents=partial_cents,
        vendors=vendors,
    )


def daily_sales(
    sales: Iterable[Sale], days: int = 7, today: Optional[date] = None
) -> List[DailySales]:
    """Sale count and revenue per day for the last ``days`` days, newest first."""
    today = today or datetime.now(timezone.utc).date()
    buckets = {today - timedelta(days=offset): DailySales(day=today - timedelta(days=offset))
               for offset in range(days)}

    for sale in sales:
        bucket = buckets.get(sale.date.date())
        if bucket is not None:
            bucket.count += 1
            bucket.revenue_cents += sale.final_amount_cents

    return sorted(buckets.values(), key=lambda bucket: bucket.day, reverse=True)


def expiry_report(
    medicines: Iterable[Medicine],
    warning_days: int,
    now: Optional[datetime] = None,
    view: str = "all",
) -> ExpiryReport:
    """
    Split medicines into already expired and expiring within ``warning_days``.

    ``view`` is "all", "expired" or "expiring"; the list it leaves out is empty.
    """
    now = now or datetime.now(timezone.utc)
    horizon = now + timedelta(days=warning_days)

    expired, expiring = [], []
    for medicine in medicines:
        expiry = medicine.expiry_date
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        if expiry < now:
            expired.append(medicine)
        elif expiry <= horizon:
            expiring.append(medicine)

    if view == "expired":
        expiring = []
    elif view == "expiring":
        expired = []

    expired.sort(key=lambda m: m.expiry_date)
    expiring.sort(key=lambda m: m.expiry_date)
    return ExpiryReport(expired=expired, expiring=expiring, days=warning_days)
