from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from pharmacy.models.base import MongoModel, PyObjectId, _utcnow


class PrescriptionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PrescribedMedicine(BaseModel):
    medicine_id: PyObjectId
    dosage: str
    duration: str


class Prescription(MongoModel):
    patient_name: str
    doctor_name: str
    date: datetime = Field(default_factory=_utcnow)
    medicines: List[PrescribedMedicine] = []
    status: PrescriptionStatus = PrescriptionStatus.PENDING
    notes: str = ""

    image_path: str
    original_filename: str

    uploaded_by: PyObjectId
    reviewed_by: Optional[PyObjectId] = None
    reviewed_at: Optional[datetime] = None
