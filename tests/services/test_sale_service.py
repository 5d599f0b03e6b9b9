from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId

from pharmacy.core.exceptions import (
    InsufficientStock,
    InvalidPaymentAmount,
    RecordNotFound,
    ValidationError,
)
from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.sale import PaymentType
from pharmacy.schemas.sale import SaleCreate
from pharmacy.services.sale_service import SaleService


def sale_request(medicine_id, quantity=5, price_cents=100, **overrides) -> SaleCreate:
    data = {
        "customer": "Sita Thapa",
        "customer_phone": "9801234567",
        "items": [{"medicine_id": str(medicine_id), "quantity": quantity, "price_cents": price_cents}],
    }
    data.update(overrides)
    return SaleCreate(**data)


class TestBuildSale:

    def test_cash_sale_is_paid_in_full(self):
        sale = SaleService.build_sale(sale_request(ObjectId(), discount_cents=50), ObjectId())

        assert sale.total_amount_cents == 500
        assert sale.final_amount_cents == 450
        assert sale.items[0].subtotal_cents == 500
        assert sale.payment_status == PaymentStatus.PAID
        assert sale.paid_amount_cents == 450
        assert sale.due_amount_cents == 0

    def test_credit_sale_starts_from_amount_paid(self):
        request = sale_request(ObjectId(), payment_type=PaymentType.CREDIT, paid_amount_cents=200)
        sale = SaleService.build_sale(request, ObjectId())

        assert sale.payment_status == PaymentStatus.PARTIAL
        assert sale.paid_amount_cents == 200
        assert sale.due_amount_cents == 300

    def test_credit_sale_with_nothing_paid_is_due(self):
        request = sale_request(ObjectId(), payment_type=PaymentType.CREDIT)
        sale = SaleService.build_sale(request, ObjectId())

        assert sale.payment_status == PaymentStatus.DUE
        assert sale.due_amount_cents == 500
        assert sale.last_payment_date is None

    def test_credit_overpayment_rejected(self):
        request = sale_request(ObjectId(), payment_type=PaymentType.CREDIT, paid_amount_cents=501)
        with pytest.raises(InvalidPaymentAmount):
            SaleService.build_sale(request, ObjectId())

    def test_discount_above_total_rejected(self):
        with pytest.raises(ValidationError):
            SaleService.build_sale(sale_request(ObjectId(), discount_cents=501), ObjectId())

    def test_malformed_medicine_id_is_not_found(self):
        with pytest.raises(RecordNotFound):
            SaleService.build_sale(sale_request("not-an-id"), ObjectId())


@pytest.mark.asyncio
async def test_create_sale_deducts_stock_and_inserts(mock_db):
    medicine_id = ObjectId()
    sale = SaleService.build_sale(sale_request(medicine_id, quantity=2), ObjectId())

    mock_db["medicines"].find_one_and_update.return_value = {"_id": medicine_id, "stock": 8}
    mock_db["sales"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    created = await SaleService.create(mock_db, sale)

    call = mock_db["medicines"].find_one_and_update.call_args
    assert call[0][0] == {"_id": medicine_id, "stock": {"$gte": 2}}
    assert call[0][1] == {"$inc": {"stock": -2}}
    assert call[1]["session"] is mock_db.session
    mock_db["sales"].insert_one.assert_called_once()
    assert mock_db["sales"].insert_one.call_args[1]["session"] is mock_db.session
    assert created.id == mock_db["sales"].insert_one.return_value.inserted_id


@pytest.mark.asyncio
async def test_create_sale_insufficient_stock_aborts(mock_db):
    medicine_id = ObjectId()
    sale = SaleService.build_sale(sale_request(medicine_id, quantity=5, price_cents=100), ObjectId())

    # Guarded $inc matches nothing: only 3 in stock
    mock_db["medicines"].find_one_and_update.return_value = None
    mock_db["medicines"].find_one.return_value = {"_id": medicine_id, "name": "Paracetamol", "stock": 3}

    with pytest.raises(InsufficientStock) as exc_info:
        await SaleService.create(mock_db, sale)

    assert exc_info.value.medicine_name == "Paracetamol"
    assert exc_info.value.available == 3
    assert exc_info.value.requested == 5
    assert "Paracetamol" in exc_info.value.message
    mock_db["sales"].insert_one.assert_not_called()
    # The transaction context saw the error, so it aborts instead of committing
    assert mock_db.transaction.__aexit__.call_args[0][0] is InsufficientStock


@pytest.mark.asyncio
async def test_create_sale_missing_medicine(mock_db):
    sale = SaleService.build_sale(sale_request(ObjectId()), ObjectId())
    mock_db["medicines"].find_one_and_update.return_value = None
    mock_db["medicines"].find_one.return_value = None

    with pytest.raises(RecordNotFound):
        await SaleService.create(mock_db, sale)

    mock_db["sales"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_create_sale_stops_at_first_short_line(mock_db):
    first, second = ObjectId(), ObjectId()
    request = SaleCreate(
        customer="Hari",
        items=[
            {"medicine_id": str(first), "quantity": 1, "price_cents": 100},
            {"medicine_id": str(second), "quantity": 9, "price_cents": 100},
        ],
    )
    sale = SaleService.build_sale(request, ObjectId())
    mock_db["medicines"].find_one_and_update.side_effect = [{"_id": first, "stock": 4}, None]
    mock_db["medicines"].find_one.return_value = {"_id": second, "name": "Cetirizine", "stock": 2}

    with pytest.raises(InsufficientStock):
        await SaleService.create(mock_db, sale)

    assert mock_db["medicines"].find_one_and_update.call_count == 2
    mock_db["sales"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_delete_sale_restores_stock(mock_db):
    sale_id, medicine_id = ObjectId(), ObjectId()
    mock_db["sales"].find_one_and_delete.return_value = {
        "_id": sale_id,
        "customer": "Sita",
        "items": [{"medicine_id": medicine_id, "quantity": 3, "price_cents": 100, "subtotal_cents": 300}],
        "total_amount_cents": 300,
        "final_amount_cents": 300,
        "created_by": ObjectId(),
        "prescription_image_path": "uploads/sales/abc.jpg",
    }

    with patch("pharmacy.services.sale_service.delete_upload") as mock_delete_upload:
        await SaleService.delete(mock_db, str(sale_id))

    mock_db["medicines"].update_one.assert_called_once()
    call = mock_db["medicines"].update_one.call_args
    assert call[0] == ({"_id": medicine_id}, {"$inc": {"stock": 3}})
    mock_delete_upload.assert_called_once_with("uploads/sales/abc.jpg")


@pytest.mark.asyncio
async def test_delete_unknown_sale(mock_db):
    mock_db["sales"].find_one_and_delete.return_value = None

    with pytest.raises(RecordNotFound):
        await SaleService.delete(mock_db, str(ObjectId()))

    mock_db["medicines"].update_one.assert_not_called()


@pytest.mark.asyncio
async def test_receive_payment(mock_db):
    sale = SaleService.build_sale(
        sale_request(ObjectId(), payment_type=PaymentType.CREDIT), ObjectId()
    )
    stored = sale.to_document()
    mock_db["sales"].find_one.return_value = stored
    mock_db["sales"].find_one_and_update.return_value = {
        **stored, "payment_status": "PARTIAL", "paid_amount_cents": 200, "due_amount_cents": 300,
    }

    updated = await SaleService.receive_payment(mock_db, str(sale.id), 200)

    update = mock_db["sales"].find_one_and_update.call_args[0][1]
    assert update["$set"]["payment_status"] == PaymentStatus.PARTIAL
    assert update["$set"]["paid_amount_cents"] == 200
    assert update["$set"]["due_amount_cents"] == 300
    assert updated.due_amount_cents == 300


@pytest.mark.asyncio
async def test_receive_payment_on_paid_sale_rejected(mock_db):
    sale = SaleService.build_sale(sale_request(ObjectId()), ObjectId())
    mock_db["sales"].find_one.return_value = sale.to_document()

    with pytest.raises(InvalidPaymentAmount):
        await SaleService.receive_payment(mock_db, str(sale.id), 100)

    mock_db["sales"].find_one_and_update.assert_not_called()


@pytest.mark.asyncio
async def test_creditors(mock_db):
    def credit(customer, phone, due):
        sale = SaleService.build_sale(
            sale_request(ObjectId(), quantity=1, price_cents=1000,
                         customer=customer, customer_phone=phone,
                         payment_type=PaymentType.CREDIT, paid_amount_cents=1000 - due),
            ObjectId(),
        )
        return sale.to_document()

    mock_db["sales"].find.return_value.to_list.return_value = [
        credit("Sita", "9801", 400),
        credit("Sita", "9801", 100),
        credit("Hari", "9802", 0),
        credit("Gita", "9803", 900),
    ]

    creditors = await SaleService.creditors(mock_db)

    assert [(c.customer, c.phone_number, c.total_due_cents, c.sales_count) for c in creditors] == [
        ("Gita", "9803", 900, 1),
        ("Sita", "9801", 500, 2),
    ]


@pytest.mark.asyncio
async def test_creditors_scoped_to_user(mock_db):
    user_id = ObjectId()

    await SaleService.creditors(mock_db, created_by=user_id)

    query = mock_db["sales"].find.call_args[0][0]
    assert query == {"payment_type": PaymentType.CREDIT, "created_by": user_id}
