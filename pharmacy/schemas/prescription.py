from pydantic import BaseModel

from pharmacy.models.prescription import PrescriptionStatus


class PrescriptionStatusUpdate(BaseModel):
    status: PrescriptionStatus
