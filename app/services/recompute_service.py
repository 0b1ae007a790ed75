"""
RecomputeService - keeps the persisted debts of a group equal to a fresh
derivation from its ledger.

Recompute cycle (one transaction):
1. Load participants, expenses and payments of the group
2. Aggregate net balances
3. Simplify balances into settlement edges
4. Delete every debt of the group and insert one debt per edge

Mutations that can move balances call one of the ``on_*`` hooks with their
own transaction session, so the mutation and the recompute commit together.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from app.core.config import settings
from app.core.errors import SettlementModeError
from app.db.session import start_transaction
from app.models.debt import Debt
from app.repositories.ledger_repo import LedgerRepository
from app.services.balance import aggregate_balances
from app.services.debt_simplifier import simplify_debts

logger = logging.getLogger(__name__)

LEDGER_MODE = "ledger"
TRACKED_MODE = "tracked"


class GroupLocks:
    """
    One asyncio.Lock per group.

    Serializes read-modify-replace cycles on the same group within this
    process. Other processes are only ordered by MongoDB transactions.

    Locks are held weakly: an entry disappears once no holder or waiter
    references it.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, group_id: ObjectId) -> asyncio.Lock:
        key = str(group_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, group_id: ObjectId):
        async with self.get(group_id):
            yield


group_locks = GroupLocks()


class RecomputeService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        ledger_repo: Optional[LedgerRepository] = None,
        mode: Optional[str] = None,
        locks: Optional[GroupLocks] = None
    ):
        self.db = db
        self.ledger_repo = ledger_repo or LedgerRepository(db)
        self.mode = mode or settings.SETTLEMENT_MODE
        self.locks = locks or group_locks

    async def recompute(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Debt]:
        """
        Regenerate the debts of a group.

        With a session the caller owns the transaction (and the group lock);
        without one a new transaction is opened under the group lock.
        """
        if session is not None:
            return await self._replace_debts(group_id, session)

        async with self.locks.hold(group_id):
            async with start_transaction(self.db) as own_session:
                return await self._replace_debts(group_id, own_session)

    async def _replace_debts(
        self, group_id: ObjectId, session: AsyncIOMotorClientSession
    ) -> List[Debt]:
        ledger = await self.ledger_repo.load_group_ledger(group_id, session=session)

        # Tracked mode settles debts in place, so payments stay out of balances
        balances = aggregate_balances(ledger, include_payments=self.mode == LEDGER_MODE)
        edges = simplify_debts(balances)

        paid_before: Dict[tuple, float] = {}
        if self.mode == TRACKED_MODE:
            for debt in await self.ledger_repo.list_debts(group_id, session=session):
                paid_before[(debt.lender_id, debt.debtor_id)] = debt.paid_amount

        debts = [
            Debt(
                group_id=group_id,
                lender_id=edge.lender_id,
                debtor_id=edge.debtor_id,
                amount=edge.amount,
                paid_amount=min(paid_before.get((edge.lender_id, edge.debtor_id), 0.0), edge.amount)
            )
            for edge in edges
        ]

        await self.ledger_repo.replace_group_debts(group_id, debts, session=session)
        logger.info(
            "Recomputed group %s: %d participants, %d expenses, %d payments -> %d debts",
            group_id, len(ledger.participants), len(ledger.expenses), len(ledger.payments), len(debts)
        )
        return debts

    # ===== POST-MUTATION HOOKS =====

    async def on_expense_created(self, group_id: ObjectId, session=None) -> List[Debt]:
        return await self.recompute(group_id, session=session)

    async def on_expense_updated(self, group_id: ObjectId, session=None) -> List[Debt]:
        return await self.recompute(group_id, session=session)

    async def on_expense_deleted(self, group_id: ObjectId, session=None) -> List[Debt]:
        return await self.recompute(group_id, session=session)

    async def on_participant_deleted(
        self, group_id: ObjectId, participant_id: ObjectId, session=None
    ) -> List[Debt]:
        logger.info("Participant %s removed from group %s", participant_id, group_id)
        return await self.recompute(group_id, session=session)

    async def on_payment_recorded(self, group_id: ObjectId, session=None) -> List[Debt]:
        if self.mode != LEDGER_MODE:
            raise SettlementModeError("Payments only trigger a recompute in ledger mode")
        return await self.recompute(group_id, session=session)
