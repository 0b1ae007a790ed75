from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from bson import ObjectId

from app.models.expense import Expense


class ExpenseRepository:
    """Expense (with embedded splits) database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["expenses"]

    async def create_expense(
        self, expense: Expense, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Expense:
        await self.collection.insert_one(expense.to_document(), session=session)
        return expense

    async def get_expense(
        self, expense_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Expense]:
        doc = await self.collection.find_one({"_id": expense_id}, session=session)
        if doc:
            return Expense(**doc)
        return None

    async def replace_expense(
        self, expense: Expense, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Expense]:
        """Overwrite an expense and all of its splits."""
        expense.updated_at = datetime.now(timezone.utc)
        result = await self.collection.replace_one(
            {"_id": expense.id},
            expense.to_document(),
            session=session
        )
        if result.matched_count == 0:
            return None
        return expense

    async def delete_expense(
        self, expense_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        result = await self.collection.delete_one({"_id": expense_id}, session=session)
        return result.deleted_count > 0

    async def list_expenses_involving(
        self, participant_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Expense]:
        """Expenses the participant paid or has a split in."""
        docs = await self.collection.find(
            {"$or": [{"payer_id": participant_id}, {"splits.participant_id": participant_id}]},
            session=session
        ).sort("_id", 1).to_list(None)
        return [Expense(**doc) for doc in docs]

    async def list_group_expenses(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Expense]:
        """Expenses of a group, newest first."""
        docs = await self.collection.find(
            {"group_id": group_id}, session=session
        ).sort("created_at", -1).to_list(None)
        return [Expense(**doc) for doc in docs]
