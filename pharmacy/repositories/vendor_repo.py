from typing import Dict, List

from bson import ObjectId

from pharmacy.models.vendor import Vendor, VendorTransaction
from pharmacy.repositories.base import LedgerRepository, Repository


class VendorRepository(Repository[Vendor]):
    collection_name = "vendors"
    model = Vendor
    kind = "Vendor"

    async def all(self) -> List[Vendor]:
        return await self.find({}, sort=[("name", 1)])

    async def names_by_id(self, vendor_ids: List[ObjectId]) -> Dict[str, str]:
        vendors = await self.find({"_id": {"$in": vendor_ids}})
        return {str(vendor.id): vendor.name for vendor in vendors}


class VendorTransactionRepository(LedgerRepository[VendorTransaction]):
    """Purchases from and payments to vendors (the payables ledger)."""

    collection_name = "vendor_transactions"
    model = VendorTransaction
    kind = "Transaction"

    async def for_vendor(self, vendor_id: ObjectId) -> List[VendorTransaction]:
        return await self.find({"vendor_id": vendor_id}, sort=[("date", -1)])

    async def outstanding(self) -> List[VendorTransaction]:
        return await self.find({"due_amount_cents": {"$gt": 0}})

    async def all(self) -> List[VendorTransaction]:
        return await self.find({})
