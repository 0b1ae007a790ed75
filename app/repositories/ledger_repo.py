"""
LedgerRepository - reads the group ledger and stores derived debts.

Responsibilities:
1. Load a consistent snapshot of participants, expenses and payments
2. Replace the debts of a group wholesale after a recompute
3. Append, list and delete payments
4. Update paid amounts of debts (tracked settlement mode)

Every method takes an optional session so it can run inside the caller's
transaction.
"""

from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from bson import ObjectId

from app.core.errors import NotFoundError
from app.models.debt import Debt
from app.models.expense import Expense
from app.models.group import Group, Participant
from app.models.ledger import GroupLedger
from app.models.payment import Payment


class LedgerRepository:
    """Repository for the expense/payment ledger and derived debts."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.groups = db["groups"]
        self.participants = db["participants"]
        self.expenses = db["expenses"]
        self.payments = db["payments"]
        self.debts = db["debts"]

    async def load_group_ledger(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> GroupLedger:
        """
        Load everything balances depend on for one group.

        Raises NotFoundError if the group does not exist.
        """
        group_doc = await self.groups.find_one({"_id": group_id}, session=session)
        if not group_doc:
            raise NotFoundError(f"Group {group_id} not found")

        query = {"group_id": group_id}
        participant_docs = await self.participants.find(query, session=session).sort("_id", 1).to_list(None)
        expense_docs = await self.expenses.find(query, session=session).sort("_id", 1).to_list(None)
        payment_docs = await self.payments.find(query, session=session).sort("_id", 1).to_list(None)

        return GroupLedger(
            group=Group(**group_doc),
            participants=[Participant(**doc) for doc in participant_docs],
            expenses=[Expense(**doc) for doc in expense_docs],
            payments=[Payment(**doc) for doc in payment_docs]
        )

    # ===== DEBTS =====

    async def list_debts(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Debt]:
        """Get all debts of a group in creation order."""
        docs = await self.debts.find({"group_id": group_id}, session=session).sort("_id", 1).to_list(None)
        return [Debt(**doc) for doc in docs]

    async def replace_group_debts(
        self,
        group_id: ObjectId,
        debts: List[Debt],
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Debt]:
        """Delete every debt of the group, then insert the given ones."""
        await self.debts.delete_many({"group_id": group_id}, session=session)
        if debts:
            await self.debts.insert_many([debt.to_document() for debt in debts], session=session)
        return debts

    async def get_debt(
        self, debt_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Debt]:
        doc = await self.debts.find_one({"_id": debt_id}, session=session)
        if doc:
            return Debt(**doc)
        return None

    async def set_debt_paid_amount(
        self,
        debt_id: ObjectId,
        paid_amount: float,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Debt]:
        """Overwrite paid_amount of one debt. Returns the updated debt or None."""
        result = await self.debts.find_one_and_update(
            {"_id": debt_id},
            {
                "$set": {
                    "paid_amount": paid_amount,
                    "updated_at": datetime.now(timezone.utc)
                }
            },
            return_document=True,
            session=session
        )
        if result:
            return Debt(**result)
        return None

    async def delete_debts_involving(
        self, participant_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> int:
        result = await self.debts.delete_many(
            {"$or": [{"lender_id": participant_id}, {"debtor_id": participant_id}]},
            session=session
        )
        return result.deleted_count

    # ===== PAYMENTS =====

    async def insert_payment(
        self, payment: Payment, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Payment:
        await self.payments.insert_one(payment.to_document(), session=session)
        return payment

    async def get_payment(
        self, payment_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Payment]:
        doc = await self.payments.find_one({"_id": payment_id}, session=session)
        if doc:
            return Payment(**doc)
        return None

    async def list_payments(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Payment]:
        """Payment history of a group, newest first."""
        docs = await self.payments.find({"group_id": group_id}, session=session).sort("created_at", -1).to_list(None)
        return [Payment(**doc) for doc in docs]

    async def delete_payment(
        self, payment_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        result = await self.payments.delete_one({"_id": payment_id}, session=session)
        return result.deleted_count > 0

    async def delete_payments_involving(
        self, participant_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> int:
        result = await self.payments.delete_many(
            {"$or": [{"payer_id": participant_id}, {"payee_id": participant_id}]},
            session=session
        )
        return result.deleted_count
