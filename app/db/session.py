import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.errors import StorageFailureError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def start_transaction(db: AsyncIOMotorDatabase) -> AsyncIterator[AsyncIOMotorClientSession]:
    """
    Open a session and run the body inside one multi-document transaction.

    The transaction commits when the body returns and aborts when it raises.
    Driver errors are re-raised as StorageFailureError.
    """
    try:
        async with await db.client.start_session() as session:
            async with session.start_transaction():
                yield session
    except PyMongoError as exc:
        logger.exception("Transaction aborted by storage failure")
        raise StorageFailureError(f"Storage failure: {exc}") from exc
