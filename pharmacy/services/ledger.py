"""
Payment bookkeeping shared by every ledger record type.

apply_payment_status() is the one rule that moves paid/due amounts.
The other helpers derive a status from an amount and then delegate to it,
so purchase orders (absolute paid amount) and sales (incremental payments)
end up with exactly the same bookkeeping as medicines and vendor
transactions (explicit status).

All functions are pure: they return an updated copy and leave the input
untouched, including when they raise.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, TypeVar

from pharmacy.core.exceptions import InvalidPaymentAmount
from pharmacy.models.ledger import LedgerRecord, PaymentHistoryEntry, PaymentStatus

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=LedgerRecord)


def apply_payment_status(
    record: R,
    new_status: PaymentStatus,
    paid_amount_cents: Optional[int] = None,
    now: Optional[datetime] = None,
) -> R:
    """
    Recompute paid/due amounts for ``new_status``.

    - PAID: paid = total, due = 0, last_payment_date = now
    - DUE: paid = 0, due = total, last_payment_date unchanged
    - PARTIAL: paid = paid_amount_cents (required, 0..total), due = total - paid;
      last_payment_date = now when paid > 0

    ``paid_amount_cents`` is ignored for PAID and DUE. Any status may follow
    any other. Records with ``tracks_payment_history`` get a history entry
    whenever the result reflects a nonzero payment.

    Raises InvalidPaymentAmount when a PARTIAL amount is missing or out of range.
    """
    new_status = PaymentStatus(new_status)
    total = record.reference_total_cents
    now = now or datetime.now(timezone.utc)

    if new_status == PaymentStatus.PAID:
        paid = total
    elif new_status == PaymentStatus.DUE:
        paid = 0
    else:
        if paid_amount_cents is None:
            raise InvalidPaymentAmount("Paid amount is required for a partial payment")
        if paid_amount_cents < 0 or paid_amount_cents > total:
            raise InvalidPaymentAmount(
                f"Paid amount must be between 0 and {total}, got {paid_amount_cents}"
            )
        paid = paid_amount_cents

    update = {
        "payment_status": new_status,
        "paid_amount_cents": paid,
        "due_amount_cents": total - paid,
    }
    paid_something = new_status != PaymentStatus.DUE and paid > 0
    if new_status == PaymentStatus.PAID or paid_something:
        update["last_payment_date"] = now

    if record.tracks_payment_history and paid_something:
        entry = PaymentHistoryEntry(amount_cents=paid, date=now, status=new_status)
        update["payment_history"] = [*record.payment_history, entry]

    return record.model_copy(update=update)


def derive_payment_status(paid_amount_cents: int, total_cents: int) -> PaymentStatus:
    if paid_amount_cents >= total_cents:
        return PaymentStatus.PAID
    if paid_amount_cents > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.DUE


def set_paid_amount(record: R, paid_amount_cents: int, now: Optional[datetime] = None) -> R:
    """Apply an absolute paid amount, deriving the status from it."""
    total = record.reference_total_cents
    if paid_amount_cents < 0 or paid_amount_cents > total:
        raise InvalidPaymentAmount(
            f"Paid amount must be between 0 and {total}, got {paid_amount_cents}"
        )
    status = derive_payment_status(paid_amount_cents, total)
    return apply_payment_status(record, status, paid_amount_cents, now=now)


def apply_payment(record: R, amount_cents: int, now: Optional[datetime] = None) -> R:
    """Record an incoming payment of ``amount_cents`` against the outstanding due."""
    if amount_cents <= 0:
        raise InvalidPaymentAmount(f"Payment amount must be positive, got {amount_cents}")
    if amount_cents > record.due_amount_cents:
        raise InvalidPaymentAmount(
            f"Payment of {amount_cents} exceeds the due amount of {record.due_amount_cents}"
        )
    return set_paid_amount(record, record.paid_amount_cents + amount_cents, now=now)


def ledger_update(before: LedgerRecord, after: LedgerRecord) -> dict:
    """
    Build the Mongo update that persists ``after`` over ``before``.

    History entries are pushed rather than rewritten so the stored log
    stays append-only.
    """
    now = datetime.now(timezone.utc)
    update: dict = {"$set": {**after.ledger_fields(), "updated_at": now}}

    if after.tracks_payment_history:
        appended = after.payment_history[len(before.payment_history):]
        if appended:
            update["$push"] = {
                "payment_history": {"$each": [entry.model_dump() for entry in appended]}
            }

    logger.debug(
        "Ledger %s %s: %s -> %s (paid %s, due %s)",
        type(after).__name__,
        after.id,
        before.payment_status.value,
        after.payment_status.value,
        after.paid_amount_cents,
        after.due_amount_cents,
    )
    return update
