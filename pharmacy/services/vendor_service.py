import logging
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from pharmacy.models.vendor import VendorTransaction
from pharmacy.repositories.vendor_repo import VendorRepository, VendorTransactionRepository
from pharmacy.schemas.report import VendorPayable, VendorSummary
from pharmacy.schemas.vendor import TransactionCreate, TransactionUpdate
from pharmacy.services.ledger import apply_payment_status
from pharmacy.services.reports import group_by_counterparty
from pharmacy.utils.validation import validate_money

logger = logging.getLogger(__name__)


class VendorService:
    @staticmethod
    async def add_transaction(
        db: AsyncIOMotorDatabase, vendor_id: str, transaction_in: TransactionCreate
    ) -> VendorTransaction:
        validate_money("Amount", transaction_in.amount_cents)
        vendor = await VendorRepository(db).get(vendor_id)

        data = transaction_in.model_dump(exclude={"payment_status", "paid_amount_cents", "date"})
        transaction = VendorTransaction(**data, vendor_id=vendor.id)
        if transaction_in.date is not None:
            transaction.date = transaction_in.date
        transaction = apply_payment_status(
            transaction, transaction_in.payment_status, transaction_in.paid_amount_cents
        )

        await VendorTransactionRepository(db).insert(transaction)
        logger.info(
            "%s of %s recorded for vendor %s (%s)",
            transaction.transaction_type.value, transaction.amount_cents,
            vendor.name, transaction.payment_status.value,
        )
        return transaction

    @staticmethod
    async def update_transaction(
        db: AsyncIOMotorDatabase, transaction_id: str, update_in: TransactionUpdate
    ) -> VendorTransaction:
        """
        Edit a transaction and re-run the ledger rule over the result.

        Without a new status the current one is kept; a PARTIAL transaction
        keeps its paid amount unless one is supplied.
        """
        transactions = VendorTransactionRepository(db)
        current = await transactions.get(transaction_id)

        changes = update_in.model_dump(
            exclude_unset=True, exclude={"payment_status", "paid_amount_cents"}
        )
        edited = current.model_copy(update=changes)

        status = update_in.payment_status or current.payment_status
        paid = update_in.paid_amount_cents
        if paid is None:
            paid = current.paid_amount_cents
        edited = apply_payment_status(edited, status, paid)

        updates = {**changes, **edited.ledger_fields()}
        return await transactions.update_fields(current.id, updates)

    @staticmethod
    async def payables(db: AsyncIOMotorDatabase) -> List[VendorPayable]:
        """Vendors we still owe money to, largest balance first."""
        outstanding = await VendorTransactionRepository(db).outstanding()
        balances = group_by_counterparty(
            outstanding,
            key_fn=lambda transaction: str(transaction.vendor_id),
            date_fn=lambda transaction: transaction.date,
        )
        names = await VendorRepository(db).names_by_id(
            list({transaction.vendor_id for transaction in outstanding})
        )
        return [
            VendorPayable(
                vendor_id=balance.key,
                name=names.get(balance.key, "Unknown vendor"),
                total_due_cents=balance.total_due_cents,
                last_transaction_date=balance.last_activity_date,
                transaction_count=balance.count,
            )
            for balance in balances
        ]

    @staticmethod
    async def summary(db: AsyncIOMotorDatabase) -> VendorSummary:
        vendors = await VendorRepository(db).all()
        outstanding = await VendorTransactionRepository(db).outstanding()
        with_dues = {str(transaction.vendor_id) for transaction in outstanding}
        return VendorSummary(
            total=len(vendors),
            active=sum(1 for vendor in vendors if vendor.is_active),
            with_dues=sum(1 for vendor in vendors if str(vendor.id) in with_dues),
        )
