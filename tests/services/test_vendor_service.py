from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from pharmacy.core.exceptions import InvalidPaymentAmount, RecordNotFound
from pharmacy.models.ledger import PaymentStatus
from pharmacy.schemas.vendor import TransactionCreate, TransactionUpdate
from pharmacy.services.vendor_service import VendorService


def transaction_doc(vendor_id, amount, due, status="DUE", when=None) -> dict:
    return {
        "_id": ObjectId(),
        "vendor_id": vendor_id,
        "medicine": "Amoxicillin",
        "transaction_type": "PURCHASE",
        "amount_cents": amount,
        "payment_status": status,
        "paid_amount_cents": amount - due,
        "due_amount_cents": due,
        "date": when or datetime(2026, 3, 1, tzinfo=timezone.utc),
    }


@pytest.mark.asyncio
async def test_add_transaction_applies_status(mock_db):
    vendor_id = ObjectId()
    mock_db["vendors"].find_one.return_value = {"_id": vendor_id, "name": "MedLine Traders"}
    mock_db["vendor_transactions"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    request = TransactionCreate(
        medicine="Amoxicillin",
        transaction_type="PURCHASE",
        amount_cents=2500,
        payment_status=PaymentStatus.PARTIAL,
        paid_amount_cents=1000,
    )
    transaction = await VendorService.add_transaction(mock_db, str(vendor_id), request)

    assert transaction.vendor_id == vendor_id
    assert transaction.paid_amount_cents == 1000
    assert transaction.due_amount_cents == 1500
    assert transaction.last_payment_date is not None
    doc = mock_db["vendor_transactions"].insert_one.call_args[0][0]
    assert doc["due_amount_cents"] == 1500


@pytest.mark.asyncio
async def test_add_transaction_unknown_vendor(mock_db):
    mock_db["vendors"].find_one.return_value = None
    request = TransactionCreate(
        medicine="Amoxicillin", transaction_type="PURCHASE",
        amount_cents=100, payment_status=PaymentStatus.DUE,
    )

    with pytest.raises(RecordNotFound):
        await VendorService.add_transaction(mock_db, str(ObjectId()), request)


@pytest.mark.asyncio
async def test_update_transaction_reapplies_rule_on_new_amount(mock_db):
    doc = transaction_doc(ObjectId(), amount=2000, due=2000)
    mock_db["vendor_transactions"].find_one.return_value = doc
    mock_db["vendor_transactions"].find_one_and_update.return_value = {
        **doc, "amount_cents": 3000, "due_amount_cents": 3000,
    }

    await VendorService.update_transaction(mock_db, str(doc["_id"]), TransactionUpdate(amount_cents=3000))

    update = mock_db["vendor_transactions"].find_one_and_update.call_args[0][1]["$set"]
    assert update["amount_cents"] == 3000
    assert update["payment_status"] == PaymentStatus.DUE
    assert update["due_amount_cents"] == 3000


@pytest.mark.asyncio
async def test_update_transaction_to_paid(mock_db):
    doc = transaction_doc(ObjectId(), amount=2000, due=2000)
    mock_db["vendor_transactions"].find_one.return_value = doc
    mock_db["vendor_transactions"].find_one_and_update.return_value = doc

    await VendorService.update_transaction(
        mock_db, str(doc["_id"]), TransactionUpdate(payment_status=PaymentStatus.PAID)
    )

    update = mock_db["vendor_transactions"].find_one_and_update.call_args[0][1]["$set"]
    assert update["paid_amount_cents"] == 2000
    assert update["due_amount_cents"] == 0
    assert update["last_payment_date"] is not None


@pytest.mark.asyncio
async def test_update_transaction_partial_out_of_range(mock_db):
    doc = transaction_doc(ObjectId(), amount=2000, due=2000)
    mock_db["vendor_transactions"].find_one.return_value = doc

    with pytest.raises(InvalidPaymentAmount):
        await VendorService.update_transaction(
            mock_db, str(doc["_id"]),
            TransactionUpdate(payment_status=PaymentStatus.PARTIAL, paid_amount_cents=2500),
        )
    mock_db["vendor_transactions"].find_one_and_update.assert_not_called()


@pytest.mark.asyncio
async def test_payables_groups_by_vendor(mock_db):
    vendor_a, vendor_b = ObjectId(), ObjectId()
    mock_db["vendor_transactions"].find.return_value.to_list.return_value = [
        transaction_doc(vendor_a, 1000, 1000, when=datetime(2026, 3, 1, tzinfo=timezone.utc)),
        transaction_doc(vendor_a, 1000, 400, "PARTIAL", when=datetime(2026, 3, 8, tzinfo=timezone.utc)),
        transaction_doc(vendor_b, 5000, 5000),
    ]
    mock_db["vendors"].find.return_value.to_list.side_effect = [
        [{"_id": vendor_a, "name": "MedLine Traders"}, {"_id": vendor_b, "name": "Himal Pharma"}],
    ]

    payables = await VendorService.payables(mock_db)

    assert [(p.name, p.total_due_cents, p.transaction_count) for p in payables] == [
        ("Himal Pharma", 5000, 1),
        ("MedLine Traders", 1400, 2),
    ]
    assert payables[1].last_transaction_date == datetime(2026, 3, 8, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_summary_counts(mock_db):
    vendor_a, vendor_b, vendor_c = ObjectId(), ObjectId(), ObjectId()
    mock_db["vendors"].find.return_value.to_list.return_value = [
        {"_id": vendor_a, "name": "A", "is_active": True},
        {"_id": vendor_b, "name": "B", "is_active": True},
        {"_id": vendor_c, "name": "C", "is_active": False},
    ]
    mock_db["vendor_transactions"].find.return_value.to_list.return_value = [
        transaction_doc(vendor_b, 100, 100),
    ]

    summary = await VendorService.summary(mock_db)

    assert summary.total == 3
    assert summary.active == 2
    assert summary.with_dues == 1
