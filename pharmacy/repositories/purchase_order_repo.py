import re
from datetime import date
from typing import List

from pharmacy.models.purchase_order import PurchaseOrder
from pharmacy.repositories.base import LedgerRepository

SORTABLE_FIELDS = {"created_at", "order_number", "status", "total_amount_cents", "due_amount_cents"}


class PurchaseOrderRepository(LedgerRepository[PurchaseOrder]):
    collection_name = "purchase_orders"
    model = PurchaseOrder
    kind = "Purchase order"

    async def list_sorted(self, sort_by: str = "created_at", sort_order: str = "desc") -> List[PurchaseOrder]:
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "created_at"
        return await self.find({}, sort=[(sort_by, 1 if sort_order == "asc" else -1)])

    async def next_order_number(self, today: date) -> str:
        """PO-YYYYMMDD-NNNN, numbered per day."""
        prefix = f"PO-{today:%Y%m%d}-"
        last = await self.collection.find_one(
            {"order_number": {"$regex": f"^{re.escape(prefix)}"}},
            sort=[("order_number", -1)],
        )
        sequence = 1
        if last:
            sequence = int(last["order_number"].rsplit("-", 1)[1]) + 1
        return f"{prefix}{sequence:04d}"

    async def delete_pending(self, order_id: str) -> bool:
        """Only pending orders may be deleted."""
        result = await self.collection.delete_one({"_id": self._oid(order_id), "status": "pending"})
        return result.deleted_count > 0
