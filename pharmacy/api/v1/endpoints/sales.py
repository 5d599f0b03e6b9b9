from datetime import datetime, timedelta, timezone
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from pharmacy.core.auth import get_current_user, require_admin, require_writer
from pharmacy.db.mongo import get_db
from pharmacy.models.sale import PaymentType, Sale
from pharmacy.models.user import User
from pharmacy.repositories.sale_repo import SaleRepository
from pharmacy.schemas.ledger import PaymentReceived
from pharmacy.schemas.report import Creditor, DailySales, StatusSummary, TotalResponse
from pharmacy.schemas.sale import SaleCreate
from pharmacy.services.reports import daily_sales, summary_by_status, total_due
from pharmacy.services.sale_service import SaleService
from pharmacy.utils.uploads import delete_upload, save_image

router = APIRouter()


def _owner_filter(user: User) -> Optional[ObjectId]:
    """Admins see every sale, everyone else only the sales they created."""
    return None if user.is_admin else user.id


def _visible_to(user: User, sale: Sale) -> bool:
    return user.is_admin or sale.created_by == user.id


@router.post("/", response_model=Sale, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_in: SaleCreate,
    current_user: User = Depends(require_writer),
    db = Depends(get_db)
):
    """Create a sale, deducting stock for every item"""
    sale = SaleService.build_sale(sale_in, current_user.id)
    return await SaleService.create(db, sale)


@router.get("/", response_model=List[Sale])
async def list_sales(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Most recent sales (only your own unless admin)"""
    query = SaleRepository.build_history_query(
        created_by=_owner_filter(current_user)
    )
    return await SaleRepository(db).find(query, sort=[("date", -1)], limit=limit)


@router.get("/history", response_model=List[Sale])
async def get_sales_history(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    payment_type: Optional[str] = None,
    payment_status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    query = SaleRepository.build_history_query(
        start_date=start_date,
        end_date=end_date,
        payment_type=payment_type,
        payment_status=payment_status,
        created_by=_owner_filter(current_user),
    )
    return await SaleRepository(db).history(query)


@router.get("/credit", response_model=List[Sale])
async def get_credit_sales(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    payment_status: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Credit sales, optionally by date range and payment status (ALL for any)"""
    query = SaleRepository.build_history_query(
        start_date=start_date,
        end_date=end_date,
        payment_type=PaymentType.CREDIT.value,
        payment_status=payment_status,
        created_by=_owner_filter(current_user),
    )
    return await SaleRepository(db).history(query)


@router.get("/creditors", response_model=List[Creditor])
async def get_creditors(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Customers with outstanding credit, largest balance first"""
    return await SaleService.creditors(db, created_by=_owner_filter(current_user))


@router.get("/customer/{name}", response_model=List[Sale])
async def get_sales_by_customer(
    name: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Sales whose customer name contains ``name`` (case-insensitive)"""
    return await SaleRepository(db).by_customer(name, created_by=_owner_filter(current_user))


@router.get("/stats/total", response_model=TotalResponse)
async def get_total_sales(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    sales = await SaleRepository(db).find({})
    return TotalResponse(total_cents=sum(sale.final_amount_cents for sale in sales))


@router.get("/stats/daily", response_model=List[DailySales])
async def get_daily_sales(
    days: int = Query(7, ge=1, le=90),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    today = datetime.now(timezone.utc).date()
    start = datetime.combine(today - timedelta(days=days - 1), datetime.min.time(), tzinfo=timezone.utc)
    sales = await SaleRepository(db).since(start)
    return daily_sales(sales, days=days, today=today)


@router.get("/stats/receivables", response_model=TotalResponse)
async def get_receivables(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Total still owed on credit sales"""
    sales = await SaleRepository(db).credit_sales()
    return TotalResponse(total_cents=total_due(sales))


@router.get("/payment/summary", response_model=StatusSummary)
async def get_payment_summary(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    sales = await SaleRepository(db).find({})
    return summary_by_status(sales)


@router.get("/{sale_id}", response_model=Sale)
async def get_sale(
    sale_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    sale = await SaleRepository(db).get(sale_id)
    if not _visible_to(current_user, sale):
        raise HTTPException(status_code=403, detail="Not authorized to view this sale")
    return sale


@router.delete("/{sale_id}")
async def delete_sale(
    sale_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Delete a sale and restore the stock it took"""
    await SaleService.delete(db, sale_id)
    return {"message": "Sale deleted successfully"}


@router.put("/{sale_id}/payment", response_model=Sale)
async def receive_payment(
    sale_id: str,
    payment_in: PaymentReceived,
    current_user: User = Depends(require_writer),
    db = Depends(get_db)
):
    """Record a payment against what is still due on a sale"""
    return await SaleService.receive_payment(db, sale_id, payment_in.amount_cents)


@router.put("/{sale_id}/prescription", response_model=Sale)
async def attach_prescription(
    sale_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(require_writer),
    db = Depends(get_db)
):
    """Attach (or replace) the prescription image of a sale"""
    repo = SaleRepository(db)
    sale = await repo.get(sale_id)
    if not _visible_to(current_user, sale):
        raise HTTPException(status_code=403, detail="Not authorized to modify this sale")

    path = await save_image(file, folder="sales")
    updated = await repo.update_fields(sale.id, {
        "prescription_image_path": path,
        "prescription_original_filename": file.filename,
    })
    if sale.prescription_image_path:
        delete_upload(sale.prescription_image_path)
    return updated
