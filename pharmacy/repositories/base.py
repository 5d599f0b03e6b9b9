from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from pharmacy.core.exceptions import RecordNotFound
from pharmacy.models.base import MongoModel
from pharmacy.models.ledger import LedgerRecord
from pharmacy.services.ledger import ledger_update
from pharmacy.utils.validation import parse_object_id

M = TypeVar("M", bound=MongoModel)


class Repository(Generic[M]):
    """CRUD for one collection, returning typed documents."""

    collection_name: str
    model: Type[M]
    kind: str

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]

    def _oid(self, record_id: str | ObjectId) -> ObjectId:
        if isinstance(record_id, ObjectId):
            return record_id
        return parse_object_id(record_id, self.kind)

    async def get(self, record_id: str | ObjectId, session=None) -> M:
        """Fetch one document or raise RecordNotFound."""
        doc = await self.collection.find_one({"_id": self._oid(record_id)}, session=session)
        if not doc:
            raise RecordNotFound(self.kind, str(record_id))
        return self.model(**doc)

    async def find(
        self,
        query: dict,
        sort: Optional[List[tuple]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[M]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(None)
        return [self.model(**doc) for doc in docs]

    async def count(self, query: dict) -> int:
        return await self.collection.count_documents(query)

    async def insert(self, record: M, session=None) -> M:
        result = await self.collection.insert_one(record.to_document(), session=session)
        record.id = result.inserted_id
        return record

    async def update_fields(self, record_id: str | ObjectId, updates: dict[str, Any]) -> M:
        """$set ``updates`` and return the stored document afterwards."""
        updates = {**updates, "updated_at": datetime.now(timezone.utc)}
        doc = await self.collection.find_one_and_update(
            {"_id": self._oid(record_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise RecordNotFound(self.kind, str(record_id))
        return self.model(**doc)

    async def delete(self, record_id: str | ObjectId, session=None) -> M:
        doc = await self.collection.find_one_and_delete(
            {"_id": self._oid(record_id)}, session=session
        )
        if not doc:
            raise RecordNotFound(self.kind, str(record_id))
        return self.model(**doc)


class LedgerRepository(Repository[M]):
    """Repository for record types carrying payment ledger fields."""

    async def save_ledger(self, before: LedgerRecord, after: LedgerRecord) -> M:
        doc = await self.collection.find_one_and_update(
            {"_id": before.id},
            ledger_update(before, after),
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise RecordNotFound(self.kind, str(before.id))
        return self.model(**doc)
