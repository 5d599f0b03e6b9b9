import math
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status

from pharmacy.core.auth import get_current_user, require_admin
from pharmacy.core.config import settings
from pharmacy.db.mongo import get_db
from pharmacy.models.medicine import Medicine
from pharmacy.models.user import User
from pharmacy.repositories.medicine_repo import MedicineRepository
from pharmacy.schemas.ledger import PaymentHistoryResponse, PaymentStatusUpdate
from pharmacy.schemas.medicine import MedicineCreate, MedicineListResponse, MedicineUpdate
from pharmacy.schemas.report import CountResponse, ExpiryReport, StatusSummary
from pharmacy.services.medicine_service import MedicineService
from pharmacy.services.reports import expiry_report, summary_by_status

router = APIRouter()


@router.get("/", response_model=MedicineListResponse)
async def list_medicines(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_field: str = "name",
    sort_direction: Literal["asc", "desc"] = "asc",
    search: str = "",
    composition: str = "",
    category: str = "",
    archived: bool = False,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Paginated, searchable medicine list"""
    repo = MedicineRepository(db)
    query = repo.build_search_query(search, composition, category, archived)
    medicines, total = await repo.list_page(query, page, limit, sort_field, sort_direction)

    return MedicineListResponse(
        medicines=medicines,
        total=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
        categories=await repo.categories(archived),
    )


@router.get("/stats/count", response_model=CountResponse)
async def count_medicines(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return CountResponse(count=await MedicineRepository(db).count({"is_archived": False}))


@router.get("/categories", response_model=List[str])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await MedicineRepository(db).categories()


@router.get("/compositions", response_model=List[str])
async def list_compositions(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await MedicineRepository(db).compositions()


@router.get("/expiry", response_model=ExpiryReport)
async def get_expiry_report(
    days: int = Query(settings.EXPIRY_WARNING_DAYS, ge=1),
    view: Literal["all", "expired", "expiring"] = Query("all", alias="filter"),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Expired medicines and those expiring within ``days``"""
    medicines = await MedicineRepository(db).active()
    return expiry_report(medicines, days, view=view)


@router.get("/payment/summary", response_model=StatusSummary)
async def get_payment_summary(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """What we paid and still owe for stock, per payment status"""
    medicines = await MedicineRepository(db).active()
    return summary_by_status(medicines)


@router.post("/", response_model=Medicine, status_code=status.HTTP_201_CREATED)
async def create_medicine(
    medicine_in: MedicineCreate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await MedicineService.create(db, medicine_in)


@router.get("/{medicine_id}", response_model=Medicine)
async def get_medicine(
    medicine_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return await MedicineRepository(db).get(medicine_id)


@router.put("/{medicine_id}", response_model=Medicine)
async def update_medicine(
    medicine_id: str,
    medicine_in: MedicineUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await MedicineService.update(db, medicine_id, medicine_in)


@router.delete("/{medicine_id}")
async def delete_medicine(
    medicine_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    await MedicineRepository(db).delete(medicine_id)
    return {"message": "Medicine deleted successfully"}


@router.put("/{medicine_id}/archive", response_model=Medicine)
async def archive_medicine(
    medicine_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await MedicineService.set_archived(db, medicine_id, True)


@router.put("/{medicine_id}/unarchive", response_model=Medicine)
async def unarchive_medicine(
    medicine_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    return await MedicineService.set_archived(db, medicine_id, False)


@router.put("/{medicine_id}/payment", response_model=Medicine)
async def update_medicine_payment(
    medicine_id: str,
    payment_in: PaymentStatusUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Set the purchase payment status (and amount, for PARTIAL)"""
    return await MedicineService.update_payment(db, medicine_id, payment_in)


@router.get("/{medicine_id}/payment-history", response_model=PaymentHistoryResponse)
async def get_payment_history(
    medicine_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    medicine = await MedicineRepository(db).get(medicine_id)
    return PaymentHistoryResponse(
        medicine_id=str(medicine.id),
        name=medicine.name,
        purchase_price_cents=medicine.purchase_price_cents,
        paid_amount_cents=medicine.paid_amount_cents,
        due_amount_cents=medicine.due_amount_cents,
        payment_status=medicine.payment_status,
        history=medicine.payment_history,
    )
