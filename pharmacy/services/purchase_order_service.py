import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from pharmacy.core.exceptions import ValidationError
from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.purchase_order import OrderItem, OrderStatus, PurchaseOrder, order_total_cents
from pharmacy.repositories.purchase_order_repo import PurchaseOrderRepository
from pharmacy.repositories.user_repo import UserRepository
from pharmacy.repositories.vendor_repo import VendorRepository
from pharmacy.schemas.purchase_order import PurchaseOrderCreate
from pharmacy.schemas.report import OrderPaymentSummary
from pharmacy.services.ledger import apply_payment_status, set_paid_amount
from pharmacy.services.reports import order_payment_summary
from pharmacy.utils.validation import parse_object_id, validate_order_items

logger = logging.getLogger(__name__)


class PurchaseOrderService:
    @staticmethod
    async def create(db: AsyncIOMotorDatabase, order_in: PurchaseOrderCreate) -> PurchaseOrder:
        validate_order_items(order_in.items)
        vendor = await VendorRepository(db).get(order_in.vendor_id)
        orders = PurchaseOrderRepository(db)

        items = [
            OrderItem(
                medicine_id=parse_object_id(item.medicine_id, "Medicine") if item.medicine_id else None,
                name=item.name.strip(),
                quantity=item.quantity,
                price_cents=item.price_cents,
            )
            for item in order_in.items
        ]
        assignee_id = None
        if order_in.assignee_id:
            assignee_id = (await UserRepository(db).get(order_in.assignee_id)).id

        order = PurchaseOrder(
            order_number=await orders.next_order_number(datetime.now(timezone.utc).date()),
            vendor_id=vendor.id,
            items=items,
            assignee_id=assignee_id,
            total_amount_cents=order_total_cents(items),
        )
        order = apply_payment_status(order, PaymentStatus.DUE)

        await orders.insert(order)
        logger.info("Purchase order %s created for %s", order.order_number, vendor.name)
        return order

    @staticmethod
    async def update_status(db: AsyncIOMotorDatabase, order_id: str, status: OrderStatus) -> PurchaseOrder:
        return await PurchaseOrderRepository(db).update_fields(order_id, {"status": status})

    @staticmethod
    async def update_assignee(
        db: AsyncIOMotorDatabase, order_id: str, assignee_id: Optional[str]
    ) -> PurchaseOrder:
        assignee = None
        if assignee_id:
            assignee = (await UserRepository(db).get(assignee_id)).id
        return await PurchaseOrderRepository(db).update_fields(order_id, {"assignee_id": assignee})

    @staticmethod
    async def archive(db: AsyncIOMotorDatabase, order_id: str) -> PurchaseOrder:
        orders = PurchaseOrderRepository(db)
        order = await orders.get(order_id)
        if order.status != OrderStatus.COMPLETED:
            raise ValidationError("Only completed orders can be archived")
        return await orders.update_fields(order.id, {"status": OrderStatus.ARCHIVED})

    @staticmethod
    async def update_payment(db: AsyncIOMotorDatabase, order_id: str, paid_amount_cents: int) -> PurchaseOrder:
        """Set the absolute amount paid; the payment status follows from it."""
        orders = PurchaseOrderRepository(db)
        order = await orders.get(order_id)
        updated = set_paid_amount(order, paid_amount_cents)
        return await orders.save_ledger(order, updated)

    @staticmethod
    async def delete(db: AsyncIOMotorDatabase, order_id: str) -> None:
        orders = PurchaseOrderRepository(db)
        if not await orders.delete_pending(order_id):
            # Tell "missing" apart from "not pending"
            await orders.get(order_id)
            raise ValidationError("Only pending orders can be deleted")

    @staticmethod
    async def payment_summary(db: AsyncIOMotorDatabase) -> OrderPaymentSummary:
        orders = await PurchaseOrderRepository(db).find({"status": {"$ne": OrderStatus.CANCELLED}})
        names = await VendorRepository(db).names_by_id(list({order.vendor_id for order in orders}))
        return order_payment_summary(orders, names)
