import logging
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from pharmacy.core.exceptions import InsufficientStock, RecordNotFound
from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.sale import PaymentType, Sale, SaleItem
from pharmacy.repositories.medicine_repo import MedicineRepository
from pharmacy.repositories.sale_repo import SaleRepository
from pharmacy.schemas.report import Creditor
from pharmacy.schemas.sale import SaleCreate
from pharmacy.services.ledger import apply_payment, apply_payment_status, set_paid_amount
from pharmacy.services.reports import creditor_key, group_by_counterparty
from pharmacy.utils.uploads import delete_upload
from pharmacy.utils.validation import parse_object_id, validate_sale

logger = logging.getLogger(__name__)


class SaleService:
    @staticmethod
    def build_sale(sale_in: SaleCreate, created_by: ObjectId) -> Sale:
        """
        Validate the request and build the sale with its opening ledger.

        Credit sales start from the amount paid up front (status derived);
        every other payment type is settled at the counter.
        """
        final_amount = validate_sale(sale_in)
        items = [
            SaleItem(
                medicine_id=parse_object_id(item.medicine_id, "Medicine"),
                quantity=item.quantity,
                price_cents=item.price_cents,
                subtotal_cents=item.quantity * item.price_cents,
            )
            for item in sale_in.items
        ]
        sale = Sale(
            customer=sale_in.customer.strip(),
            customer_phone=sale_in.customer_phone,
            items=items,
            total_amount_cents=final_amount + sale_in.discount_cents,
            discount_cents=sale_in.discount_cents,
            final_amount_cents=final_amount,
            payment_type=sale_in.payment_type,
            created_by=created_by,
        )
        if sale.payment_type == PaymentType.CREDIT:
            return set_paid_amount(sale, sale_in.paid_amount_cents)
        return apply_payment_status(sale, PaymentStatus.PAID)

    @staticmethod
    async def create(db: AsyncIOMotorDatabase, sale: Sale) -> Sale:
        """
        Deduct stock for every line and insert the sale, all or nothing.

        A missing medicine or a line asking for more than is in stock raises
        inside the transaction, so neither the stock changes nor the sale
        become visible.
        """
        medicines = MedicineRepository(db)
        sales = SaleRepository(db)

        async with await db.client.start_session() as session:
            async with session.start_transaction():
                for item in sale.items:
                    updated = await medicines.collection.find_one_and_update(
                        {"_id": item.medicine_id, "stock": {"$gte": item.quantity}},
                        {"$inc": {"stock": -item.quantity}},
                        session=session,
                    )
                    if updated is None:
                        current = await medicines.collection.find_one(
                            {"_id": item.medicine_id}, session=session
                        )
                        if current is None:
                            raise RecordNotFound("Medicine", str(item.medicine_id))
                        raise InsufficientStock(current["name"], current["stock"], item.quantity)

                await sales.insert(sale, session=session)

        logger.info(
            "Sale %s created for %s: %s line(s), %s due",
            sale.id, sale.customer, len(sale.items), sale.due_amount_cents,
        )
        return sale

    @staticmethod
    async def delete(db: AsyncIOMotorDatabase, sale_id: str) -> Sale:
        """Remove a sale and put its quantities back on the shelf."""
        medicines = MedicineRepository(db)
        sales = SaleRepository(db)

        async with await db.client.start_session() as session:
            async with session.start_transaction():
                sale = await sales.delete(sale_id, session=session)
                for item in sale.items:
                    await medicines.collection.update_one(
                        {"_id": item.medicine_id},
                        {"$inc": {"stock": item.quantity}},
                        session=session,
                    )

        if sale.prescription_image_path:
            delete_upload(sale.prescription_image_path)
        logger.info("Sale %s deleted, stock restored for %s line(s)", sale.id, len(sale.items))
        return sale

    @staticmethod
    async def receive_payment(db: AsyncIOMotorDatabase, sale_id: str, amount_cents: int) -> Sale:
        sales = SaleRepository(db)
        sale = await sales.get(sale_id)
        updated = apply_payment(sale, amount_cents)
        return await sales.save_ledger(sale, updated)

    @staticmethod
    async def creditors(
        db: AsyncIOMotorDatabase, created_by: Optional[ObjectId] = None
    ) -> List[Creditor]:
        """Customers with outstanding credit, largest balance first.

        With ``created_by`` only that user's credit sales are counted.
        """
        credit_sales = await SaleRepository(db).credit_sales(created_by)
        balances = group_by_counterparty(
            credit_sales, key_fn=creditor_key, date_fn=lambda sale: sale.date
        )
        creditors = []
        for balance in balances:
            customer, phone = balance.key.rsplit("|", 1)
            creditors.append(Creditor(
                customer=customer,
                phone_number=phone,
                total_due_cents=balance.total_due_cents,
                last_purchase_date=balance.last_activity_date,
                sales_count=balance.count,
            ))
        return creditors
