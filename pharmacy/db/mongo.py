import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pharmacy.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Users
    await mongodb.db["users"].create_index("email", unique=True)
    await mongodb.db["users"].create_index("username", unique=True)

    # Medicines
    await mongodb.db["medicines"].create_index([("is_archived", 1), ("name", 1)])
    await mongodb.db["medicines"].create_index("expiry_date")
    await mongodb.db["medicines"].create_index("payment_status")

    # Sales
    await mongodb.db["sales"].create_index([("payment_type", 1), ("date", -1)])
    await mongodb.db["sales"].create_index("created_by")

    # Vendors
    await mongodb.db["vendor_transactions"].create_index("vendor_id")

    # Purchase orders
    await mongodb.db["purchase_orders"].create_index("order_number", unique=True)

    # Prescriptions
    await mongodb.db["prescriptions"].create_index("uploaded_by")

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
