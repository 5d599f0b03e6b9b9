from typing import List

from pharmacy.models.prescription import Prescription
from pharmacy.repositories.base import Repository


class PrescriptionRepository(Repository[Prescription]):
    collection_name = "prescriptions"
    model = Prescription
    kind = "Prescription"

    async def recent(self, query: dict) -> List[Prescription]:
        return await self.find(query, sort=[("created_at", -1)])
