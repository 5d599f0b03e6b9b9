import logging
from typing import List

from fastapi import APIRouter, Depends, status

from pharmacy.core.auth import get_current_user, require_admin
from pharmacy.db.mongo import get_db
from pharmacy.models.user import User
from pharmacy.models.vendor import Vendor, VendorTransaction
from pharmacy.repositories.vendor_repo import VendorRepository, VendorTransactionRepository
from pharmacy.schemas.report import CountResponse, TotalResponse, VendorPayable, VendorSummary
from pharmacy.schemas.vendor import TransactionCreate, TransactionUpdate, VendorCreate, VendorUpdate
from pharmacy.services.reports import total_due
from pharmacy.services.vendor_service import VendorService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[Vendor])
async def list_vendors(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await VendorRepository(db).all()


@router.post("/", response_model=Vendor, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    vendor_in: VendorCreate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    vendor = Vendor(**vendor_in.model_dump())
    return await VendorRepository(db).insert(vendor)


@router.get("/summary", response_model=VendorSummary)
async def get_vendor_summary(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await VendorService.summary(db)


@router.get("/stats/count", response_model=CountResponse)
async def count_vendors(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return CountResponse(count=await VendorRepository(db).count({"is_active": True}))


@router.get("/stats/payables", response_model=TotalResponse)
async def get_total_payables(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Total still owed to vendors"""
    transactions = await VendorTransactionRepository(db).outstanding()
    return TotalResponse(total_cents=total_due(transactions))


@router.get("/payables", response_model=List[VendorPayable])
async def get_payables(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await VendorService.payables(db)


@router.put("/transactions/{transaction_id}", response_model=VendorTransaction)
async def update_transaction(
    transaction_id: str,
    transaction_in: TransactionUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await VendorService.update_transaction(db, transaction_id, transaction_in)


@router.get("/{vendor_id}", response_model=Vendor)
async def get_vendor(
    vendor_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await VendorRepository(db).get(vendor_id)


@router.put("/{vendor_id}", response_model=Vendor)
async def update_vendor(
    vendor_id: str,
    vendor_in: VendorUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    repo = VendorRepository(db)
    updates = vendor_in.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        return await repo.get(vendor_id)
    return await repo.update_fields(vendor_id, updates)


@router.delete("/{vendor_id}")
async def delete_vendor(
    vendor_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Delete a vendor together with its transactions"""
    vendor = await VendorRepository(db).delete(vendor_id)
    result = await VendorTransactionRepository(db).collection.delete_many({"vendor_id": vendor.id})
    logger.info("Vendor %s deleted with %s transaction(s)", vendor.name, result.deleted_count)
    return {"message": "Vendor deleted successfully"}


@router.get("/{vendor_id}/transactions", response_model=List[VendorTransaction])
async def list_transactions(
    vendor_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    vendor = await VendorRepository(db).get(vendor_id)
    return await VendorTransactionRepository(db).for_vendor(vendor.id)


@router.post(
    "/{vendor_id}/transactions",
    response_model=VendorTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    vendor_id: str,
    transaction_in: TransactionCreate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await VendorService.add_transaction(db, vendor_id, transaction_in)
