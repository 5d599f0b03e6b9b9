from typing import List, Literal

from fastapi import APIRouter, Depends, status

from pharmacy.core.auth import get_current_user, require_admin
from pharmacy.db.mongo import get_db
from pharmacy.models.purchase_order import PurchaseOrder
from pharmacy.models.user import User
from pharmacy.repositories.purchase_order_repo import PurchaseOrderRepository
from pharmacy.schemas.ledger import PaymentAmountUpdate
from pharmacy.schemas.purchase_order import OrderAssigneeUpdate, OrderStatusUpdate, PurchaseOrderCreate
from pharmacy.schemas.report import OrderPaymentSummary
from pharmacy.services.purchase_order_service import PurchaseOrderService

router = APIRouter()


@router.get("/", response_model=List[PurchaseOrder])
async def list_orders(
    sort_by: str = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PurchaseOrderRepository(db).list_sorted(sort_by, sort_order)


@router.post("/", response_model=PurchaseOrder, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_in: PurchaseOrderCreate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await PurchaseOrderService.create(db, order_in)


@router.get("/payment/summary", response_model=OrderPaymentSummary)
async def get_payment_summary(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Totals across non-cancelled orders with dues per vendor"""
    return await PurchaseOrderService.payment_summary(db)


@router.get("/{order_id}", response_model=PurchaseOrder)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await PurchaseOrderRepository(db).get(order_id)


@router.patch("/{order_id}/status", response_model=PurchaseOrder)
async def update_order_status(
    order_id: str,
    status_in: OrderStatusUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await PurchaseOrderService.update_status(db, order_id, status_in.status)


@router.patch("/{order_id}/assignee", response_model=PurchaseOrder)
async def update_order_assignee(
    order_id: str,
    assignee_in: OrderAssigneeUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await PurchaseOrderService.update_assignee(db, order_id, assignee_in.assignee_id)


@router.patch("/{order_id}/archive", response_model=PurchaseOrder)
async def archive_order(
    order_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await PurchaseOrderService.archive(db, order_id)


@router.patch("/{order_id}/payment", response_model=PurchaseOrder)
async def update_order_payment(
    order_id: str,
    payment_in: PaymentAmountUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Set the amount paid so far; the payment status is derived from it"""
    return await PurchaseOrderService.update_payment(db, order_id, payment_in.paid_amount_cents)


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Delete a purchase order (pending orders only)"""
    await PurchaseOrderService.delete(db, order_id)
    return {"message": "Purchase order deleted successfully"}
