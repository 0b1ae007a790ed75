"""
ParticipantService - group membership: adding, renaming and removing participants.

Adding or renaming a member does not move any balance, so neither recomputes.

Deleting a participant purges everything that names them before the group's
debts are recomputed, all in one transaction:
1. Expenses they paid are deleted
2. Their splits are removed from other expenses, and the cost of each such
   expense shrinks by the removed share (an expense left without cost or
   splits is deleted), so every remaining expense still balances
3. Payments they sent or received are deleted
4. Debts naming them are deleted
5. The participant row is deleted and the debts are recomputed
"""

import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import NotFoundError
from app.db.session import start_transaction
from app.models.debt import DUST_THRESHOLD, Debt
from app.models.group import Participant
from app.repositories.expense_repo import ExpenseRepository
from app.repositories.group_repo import GroupRepository
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.group import ParticipantCreate, ParticipantUpdate
from app.services.recompute_service import GroupLocks, RecomputeService, group_locks
from app.utils.ids import require_object_id
from app.utils.participant_validation import clean_participant_names

logger = logging.getLogger(__name__)


class ParticipantService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        group_repo: Optional[GroupRepository] = None,
        expense_repo: Optional[ExpenseRepository] = None,
        ledger_repo: Optional[LedgerRepository] = None,
        recompute_service: Optional[RecomputeService] = None,
        locks: Optional[GroupLocks] = None
    ):
        self.db = db
        self.group_repo = group_repo or GroupRepository(db)
        self.expense_repo = expense_repo or ExpenseRepository(db)
        self.ledger_repo = ledger_repo or LedgerRepository(db)
        self.locks = locks or group_locks
        self.recompute_service = recompute_service or RecomputeService(
            db, ledger_repo=self.ledger_repo, locks=self.locks
        )

    async def delete_participant(self, participant_id: str) -> List[Debt]:
        """Delete a participant and everything referencing them; returns the new debts."""
        oid = require_object_id(participant_id, "Participant")
        participant = await self.group_repo.get_participant(oid)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")
        group_id = participant.group_id

        async with self.locks.hold(group_id):
            async with start_transaction(self.db) as session:
                deleted_expenses = 0
                shrunk_expenses = 0
                for expense in await self.expense_repo.list_expenses_involving(oid, session=session):
                    if expense.payer_id == oid:
                        await self.expense_repo.delete_expense(expense.id, session=session)
                        deleted_expenses += 1
                        continue

                    removed = sum(s.amount for s in expense.splits if s.participant_id == oid)
                    expense.splits = [s for s in expense.splits if s.participant_id != oid]
                    expense.cost -= removed
                    if expense.cost <= DUST_THRESHOLD or not expense.splits:
                        await self.expense_repo.delete_expense(expense.id, session=session)
                        deleted_expenses += 1
                    else:
                        await self.expense_repo.replace_expense(expense, session=session)
                        shrunk_expenses += 1

                deleted_payments = await self.ledger_repo.delete_payments_involving(oid, session=session)
                deleted_debts = await self.ledger_repo.delete_debts_involving(oid, session=session)

                if not await self.group_repo.delete_participant(oid, session=session):
                    raise NotFoundError(f"Participant {participant_id} not found")

                debts = await self.recompute_service.on_participant_deleted(group_id, oid, session=session)

        logger.info(
            "Purged participant %s: %d expenses deleted, %d expenses shrunk, %d payments, %d debts",
            oid, deleted_expenses, shrunk_expenses, deleted_payments, deleted_debts
        )
        return debts

    async def add_participant(self, participant_in: ParticipantCreate) -> Participant:
        """
        Add a member to a group.

        A new member has no expenses or payments, so balances and debts are
        unchanged and no recompute runs.
        """
        group_id = require_object_id(participant_in.group_id, "Group")

        async with self.locks.hold(group_id):
            async with start_transaction(self.db) as session:
                if await self.group_repo.get_group(group_id, session=session) is None:
                    raise NotFoundError(f"Group {participant_in.group_id} not found")
                members = await self.group_repo.list_participants(group_id, session=session)
                (name,) = clean_participant_names([participant_in.name], taken=[p.name for p in members])

                participant = Participant(name=name, group_id=group_id)
                await self.group_repo.add_participant(participant, session=session)

        logger.info("Participant %s added to group %s", participant.id, group_id)
        return participant

    async def rename_participant(self, participant_id: str, participant_in: ParticipantUpdate) -> Participant:
        """Change a participant's name. Debts reference ids, so nothing is recomputed."""
        oid = require_object_id(participant_id, "Participant")
        participant = await self.group_repo.get_participant(oid)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")

        async with self.locks.hold(participant.group_id):
            async with start_transaction(self.db) as session:
                others = [
                    p.name for p in await self.group_repo.list_participants(participant.group_id, session=session)
                    if p.id != oid
                ]
                (name,) = clean_participant_names([participant_in.name], taken=others)

                updated = await self.group_repo.rename_participant(oid, name, session=session)
                if updated is None:
                    raise NotFoundError(f"Participant {participant_id} not found")

        logger.info("Participant %s renamed in group %s", oid, participant.group_id)
        return updated
