"""Validation run before any repository write."""
from typing import List

from bson import ObjectId

from pharmacy.core.exceptions import RecordNotFound, ValidationError
from pharmacy.schemas.medicine import MedicineCreate, MedicineUpdate
from pharmacy.schemas.purchase_order import OrderItemCreate
from pharmacy.schemas.sale import SaleCreate


def parse_object_id(value: str, kind: str) -> ObjectId:
    """Unknown or malformed ids are reported as a missing record."""
    if not ObjectId.is_valid(value):
        raise RecordNotFound(kind, value)
    return ObjectId(value)


def validate_money(name: str, amount_cents: int) -> None:
    if amount_cents < 0:
        raise ValidationError(f"{name} cannot be negative: {amount_cents}")


def validate_medicine(medicine: MedicineCreate | MedicineUpdate) -> None:
    """
    Validate medicine fields.

    Rules:
    - prices must be non-negative
    - stock must be non-negative
    - composition must list at least one non-blank ingredient
    """
    if medicine.price_cents is not None:
        validate_money("Price", medicine.price_cents)
    if getattr(medicine, "purchase_price_cents", None) is not None:
        validate_money("Purchase price", medicine.purchase_price_cents)
    if medicine.stock is not None and medicine.stock < 0:
        raise ValidationError(f"Stock cannot be negative: {medicine.stock}")
    if medicine.composition is not None:
        if not any(part.strip() for part in medicine.composition):
            raise ValidationError("Composition must list at least one ingredient")


def validate_sale(sale: SaleCreate) -> int:
    """Check a sale and return its final amount (total minus discount)."""
    if not sale.items:
        raise ValidationError("A sale needs at least one item")

    total = 0
    for item in sale.items:
        if item.quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {item.quantity}")
        validate_money("Item price", item.price_cents)
        total += item.quantity * item.price_cents

    validate_money("Discount", sale.discount_cents)
    if sale.discount_cents > total:
        raise ValidationError(
            f"Discount of {sale.discount_cents} exceeds the sale total of {total}"
        )
    return total - sale.discount_cents


def validate_order_items(items: List[OrderItemCreate]) -> None:
    if not items:
        raise ValidationError("Vendor and at least one item are required")
    for item in items:
        if not item.name.strip() or item.quantity <= 0 or item.price_cents < 0:
            raise ValidationError("Each item must have a valid name, quantity, and price")
