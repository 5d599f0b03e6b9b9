import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from pharmacy.core.auth import get_current_user, require_admin, require_writer
from pharmacy.db.mongo import get_db
from pharmacy.models.prescription import Prescription, PrescriptionStatus
from pharmacy.models.user import User
from pharmacy.repositories.prescription_repo import PrescriptionRepository
from pharmacy.schemas.prescription import PrescriptionStatusUpdate
from pharmacy.schemas.report import CountResponse
from pharmacy.utils.uploads import delete_upload, save_image

logger = logging.getLogger(__name__)

router = APIRouter()


def _scope(user: User) -> dict:
    """Admins see every prescription, everyone else only their uploads."""
    return {} if user.is_admin else {"uploaded_by": user.id}


@router.post("/upload", response_model=Prescription, status_code=status.HTTP_201_CREATED)
async def upload_prescription(
    file: UploadFile = File(...),
    patient_name: str = Form(...),
    doctor_name: str = Form(...),
    notes: str = Form(""),
    current_user: User = Depends(require_writer),
    db = Depends(get_db)
):
    """Upload a prescription image for review"""
    path = await save_image(file)
    prescription = Prescription(
        patient_name=patient_name.strip(),
        doctor_name=doctor_name.strip(),
        notes=notes,
        image_path=path,
        original_filename=file.filename or "prescription",
        uploaded_by=current_user.id,
    )
    return await PrescriptionRepository(db).insert(prescription)


@router.get("/", response_model=List[Prescription])
async def list_prescriptions(
    status_filter: Optional[PrescriptionStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    query = _scope(current_user)
    if status_filter:
        query["status"] = status_filter
    return await PrescriptionRepository(db).recent(query)


@router.get("/stats/count", response_model=CountResponse)
async def count_prescriptions(
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    return CountResponse(count=await PrescriptionRepository(db).count(_scope(current_user)))


@router.get("/{prescription_id}", response_model=Prescription)
async def get_prescription(
    prescription_id: str,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    prescription = await PrescriptionRepository(db).get(prescription_id)
    if not current_user.is_admin and prescription.uploaded_by != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized to view this prescription")
    return prescription


@router.put("/{prescription_id}/status", response_model=Prescription)
async def review_prescription(
    prescription_id: str,
    status_in: PrescriptionStatusUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Approve or reject a prescription"""
    prescription = await PrescriptionRepository(db).update_fields(prescription_id, {
        "status": status_in.status,
        "reviewed_by": current_user.id,
        "reviewed_at": datetime.now(timezone.utc),
    })
    logger.info("Prescription %s marked %s", prescription_id, status_in.status.value)
    return prescription


@router.delete("/{prescription_id}")
async def delete_prescription(
    prescription_id: str,
    current_user: User = Depends(require_writer),
    db = Depends(get_db)
):
    repo = PrescriptionRepository(db)
    prescription = await repo.get(prescription_id)
    if not current_user.is_admin and prescription.uploaded_by != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this prescription")

    await repo.delete(prescription.id)
    delete_upload(prescription.image_path)
    return {"message": "Prescription deleted successfully"}
