import logging
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import InvalidArgumentError, NotFoundError
from app.db.session import start_transaction
from app.models.expense import Expense, Split
from app.repositories.expense_repo import ExpenseRepository
from app.repositories.group_repo import GroupRepository
from app.schemas.expense import ExpenseBase, ExpenseCreate, ExpenseUpdate
from app.services.recompute_service import GroupLocks, RecomputeService, group_locks
from app.utils.expense_validation import validate_cost, validate_members, validate_splits
from app.utils.ids import require_object_id

logger = logging.getLogger(__name__)


class ExpenseService:
    """Expense mutations. Each one recomputes the group's debts before committing."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        expense_repo: Optional[ExpenseRepository] = None,
        group_repo: Optional[GroupRepository] = None,
        recompute_service: Optional[RecomputeService] = None,
        locks: Optional[GroupLocks] = None
    ):
        self.db = db
        self.expense_repo = expense_repo or ExpenseRepository(db)
        self.group_repo = group_repo or GroupRepository(db)
        self.locks = locks or group_locks
        self.recompute_service = recompute_service or RecomputeService(db, locks=self.locks)

    async def create_expense(self, expense_in: ExpenseCreate) -> Expense:
        group_id = require_object_id(expense_in.group_id, "Group")
        payer_id, splits = self._parse(expense_in)

        async with self.locks.hold(group_id):
            async with start_transaction(self.db) as session:
                await self._validate_members(group_id, payer_id, splits, session)
                expense = Expense(
                    group_id=group_id,
                    name=expense_in.name,
                    emoji=expense_in.emoji,
                    cost=expense_in.cost,
                    payer_id=payer_id,
                    split_type=expense_in.split_type,
                    splits=splits
                )
                await self.expense_repo.create_expense(expense, session=session)
                await self.recompute_service.on_expense_created(group_id, session=session)

        logger.info("Expense %s (%.2f) created in group %s", expense.id, expense.cost, group_id)
        return expense

    async def update_expense(self, expense_id: str, expense_in: ExpenseUpdate) -> Expense:
        """Replace an expense and its splits; the expense stays in its group."""
        oid = require_object_id(expense_id, "Expense")
        payer_id, splits = self._parse(expense_in)
        existing = await self._load_expense(oid)

        async with self.locks.hold(existing.group_id):
            async with start_transaction(self.db) as session:
                existing = await self._load_expense(oid, session=session)
                await self._validate_members(existing.group_id, payer_id, splits, session)

                expense = Expense(
                    id=existing.id,
                    group_id=existing.group_id,
                    created_at=existing.created_at,
                    name=expense_in.name,
                    emoji=expense_in.emoji,
                    cost=expense_in.cost,
                    payer_id=payer_id,
                    split_type=expense_in.split_type,
                    splits=splits
                )

                if await self.expense_repo.replace_expense(expense, session=session) is None:
                    raise NotFoundError(f"Expense {expense_id} not found")
                await self.recompute_service.on_expense_updated(expense.group_id, session=session)

        logger.info("Expense %s updated in group %s", expense.id, expense.group_id)
        return expense

    async def delete_expense(self, expense_id: str) -> None:
        oid = require_object_id(expense_id, "Expense")
        existing = await self._load_expense(oid)

        async with self.locks.hold(existing.group_id):
            async with start_transaction(self.db) as session:
                if not await self.expense_repo.delete_expense(oid, session=session):
                    raise NotFoundError(f"Expense {expense_id} not found")
                await self.recompute_service.on_expense_deleted(existing.group_id, session=session)

        logger.info("Expense %s deleted from group %s", oid, existing.group_id)

    async def get_expense(self, expense_id: str) -> Expense:
        """One expense with its splits."""
        return await self._load_expense(require_object_id(expense_id, "Expense"))

    async def list_group_expenses(self, group_id: str) -> List[Expense]:
        oid = require_object_id(group_id, "Group")
        if await self.group_repo.get_group(oid) is None:
            raise NotFoundError(f"Group {group_id} not found")
        return await self.expense_repo.list_group_expenses(oid)

    # ===== PRIVATE HELPERS =====

    @staticmethod
    def _parse(expense_in: ExpenseBase) -> tuple[ObjectId, List[Split]]:
        """Validate amounts and turn caller ids into ObjectIds, before any write."""
        validate_cost(expense_in.cost)

        payer_id = ExpenseService._member_id(expense_in.payer_id, "Payer")
        splits = [
            Split(participant_id=ExpenseService._member_id(split.participant_id, "Split participant"), amount=split.amount)
            for split in expense_in.splits
        ]
        validate_splits(expense_in.cost, splits)
        return payer_id, splits

    @staticmethod
    def _member_id(value: str, kind: str) -> ObjectId:
        if not ObjectId.is_valid(value):
            raise InvalidArgumentError(f"{kind} id {value!r} is not valid")
        return ObjectId(value)

    async def _validate_members(self, group_id: ObjectId, payer_id: ObjectId, splits: List[Split], session) -> None:
        if await self.group_repo.get_group(group_id, session=session) is None:
            raise NotFoundError(f"Group {group_id} not found")
        participants = await self.group_repo.list_participants(group_id, session=session)
        validate_members(payer_id, splits, [p.id for p in participants])

    async def _load_expense(self, expense_id: ObjectId, session=None) -> Expense:
        expense = await self.expense_repo.get_expense(expense_id, session=session)
        if expense is None:
            raise NotFoundError(f"Expense {expense_id} not found")
        return expense
