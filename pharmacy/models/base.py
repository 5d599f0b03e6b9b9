"""Base document model shared by every collection."""
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import core_schema


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PyObjectId(ObjectId):
    """ObjectId field: accepts an ObjectId or its hex string, dumps to str in JSON."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        # Native ObjectId for Mongo writes, str for API responses
        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any):
        return {"type": "string", "pattern": "^[0-9a-f]{24}$"}

    @classmethod
    def validate(cls, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError(f"{value!r} is not a valid ObjectId")


class MongoModel(BaseModel):
    """A stored document; ``id`` is Mongo's ``_id``."""

    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    def to_document(self) -> dict:
        """Dump for insert_one, keeping ObjectIds and datetimes native."""
        return self.model_dump(by_alias=True, exclude=set(self.model_computed_fields))
