import re
from datetime import datetime
from typing import List, Optional

from bson import ObjectId

from pharmacy.core.exceptions import ValidationError
from pharmacy.models.ledger import PaymentStatus
from pharmacy.models.sale import PaymentType, Sale
from pharmacy.repositories.base import LedgerRepository


class SaleRepository(LedgerRepository[Sale]):
    """Sales and the receivables they leave behind."""

    collection_name = "sales"
    model = Sale
    kind = "Sale"

    @staticmethod
    def build_history_query(
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        payment_type: Optional[str] = None,
        payment_status: Optional[str] = None,
        created_by: Optional[ObjectId] = None,
    ) -> dict:
        query: dict = {}
        if start_date and end_date:
            query["date"] = {"$gte": start_date, "$lte": end_date}
        try:
            if payment_type:
                query["payment_type"] = PaymentType(payment_type.upper())
            if payment_status and payment_status.upper() != "ALL":
                query["payment_status"] = PaymentStatus(payment_status.upper())
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if created_by:
            query["created_by"] = created_by
        return query

    async def history(self, query: dict) -> List[Sale]:
        return await self.find(query, sort=[("date", -1)])

    async def credit_sales(self, created_by: Optional[ObjectId] = None) -> List[Sale]:
        query = self.build_history_query(payment_type=PaymentType.CREDIT.value, created_by=created_by)
        return await self.history(query)

    async def by_customer(self, name: str, created_by: Optional[ObjectId] = None) -> List[Sale]:
        """Case-insensitive partial match on the customer name, newest first."""
        query = self.build_history_query(created_by=created_by)
        query["customer"] = {"$regex": re.escape(name.strip()), "$options": "i"}
        return await self.history(query)

    async def since(self, start: datetime) -> List[Sale]:
        return await self.find({"date": {"$gte": start}})
