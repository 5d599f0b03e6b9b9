import re
from typing import List

from pharmacy.models.medicine import Medicine
from pharmacy.repositories.base import LedgerRepository

SORTABLE_FIELDS = {
    "name", "category", "price_cents", "stock", "expiry_date",
    "manufacturer", "purchase_price_cents", "due_amount_cents", "created_at",
}


class MedicineRepository(LedgerRepository[Medicine]):
    """Medicine inventory and its purchase ledger."""

    collection_name = "medicines"
    model = Medicine
    kind = "Medicine"

    @staticmethod
    def build_search_query(
        search: str = "",
        composition: str = "",
        category: str = "",
        archived: bool = False,
    ) -> dict:
        """Case-insensitive search across name/description/manufacturer/batch."""
        query: dict = {"is_archived": archived}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [
                {"name": pattern},
                {"description": pattern},
                {"manufacturer": pattern},
                {"batch_number": pattern},
            ]
        if composition:
            query["composition"] = {"$regex": re.escape(composition), "$options": "i"}
        if category:
            query["category"] = category
        return query

    async def list_page(
        self,
        query: dict,
        page: int,
        limit: int,
        sort_field: str = "name",
        sort_direction: str = "asc",
    ) -> tuple[List[Medicine], int]:
        if sort_field not in SORTABLE_FIELDS:
            sort_field = "name"
        direction = -1 if sort_direction == "desc" else 1

        medicines = await self.find(
            query,
            sort=[(sort_field, direction)],
            skip=(page - 1) * limit,
            limit=limit,
        )
        total = await self.count(query)
        return medicines, total

    async def categories(self, archived: bool = False) -> List[str]:
        return sorted(await self.collection.distinct("category", {"is_archived": archived}))

    async def compositions(self) -> List[str]:
        # distinct on an array field already unwinds it
        values = await self.collection.distinct("composition", {"is_archived": False})
        return sorted({value for value in values if value})

    async def active(self) -> List[Medicine]:
        return await self.find({"is_archived": False}, sort=[("expiry_date", 1)])
