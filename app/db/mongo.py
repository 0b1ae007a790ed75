import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    # Create indexes
    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Participant lookups by group
    await mongodb.db["participants"].create_index("group_id")

    # Expense indexes
    await mongodb.db["expenses"].create_index("group_id")
    await mongodb.db["expenses"].create_index("payer_id")
    await mongodb.db["expenses"].create_index("splits.participant_id")

    # Payment indexes
    await mongodb.db["payments"].create_index("group_id")
    await mongodb.db["payments"].create_index([("payer_id", 1), ("payee_id", 1)])

    # Debt indexes
    await mongodb.db["debts"].create_index("group_id")
    await mongodb.db["debts"].create_index([("lender_id", 1), ("debtor_id", 1)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
