from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import NotFoundError
from app.models.debt import Debt
from app.models.payment import Payment
from app.repositories.group_repo import GroupRepository
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.debt import ParticipantBalanceResponse
from app.utils.ids import require_object_id


class DebtService:
    """Read side of the settlement engine: current debts, balances and payments."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        ledger_repo: Optional[LedgerRepository] = None,
        group_repo: Optional[GroupRepository] = None
    ):
        self.db = db
        self.ledger_repo = ledger_repo or LedgerRepository(db)
        self.group_repo = group_repo or GroupRepository(db)

    async def get_group_debts(self, group_id: str, outstanding_only: bool = False) -> List[Debt]:
        """
        Persisted debts of a group.

        With outstanding_only, debts whose unpaid part is dust are left out
        (only relevant in tracked mode, where paid_amount moves).
        """
        oid = await self._require_group(group_id)
        debts = await self.ledger_repo.list_debts(oid)
        if outstanding_only:
            debts = [debt for debt in debts if debt.is_outstanding()]
        return debts

    async def get_participant_balance(self, group_id: str, participant_id: str) -> ParticipantBalanceResponse:
        """Sum the unpaid parts of the debts a participant lends or owes."""
        group_oid = await self._require_group(group_id)
        participant_oid = require_object_id(participant_id, "Participant")
        participant = await self.group_repo.get_participant(participant_oid)
        if participant is None or participant.group_id != group_oid:
            raise NotFoundError(f"Participant {participant_id} not found in group {group_id}")

        owes = 0.0
        is_owed = 0.0
        for debt in await self.ledger_repo.list_debts(group_oid):
            if debt.debtor_id == participant_oid:
                owes += debt.open_amount()
            elif debt.lender_id == participant_oid:
                is_owed += debt.open_amount()

        return ParticipantBalanceResponse(
            participant_id=str(participant_oid),
            owes=owes,
            is_owed=is_owed,
            net=is_owed - owes
        )

    async def list_payments(self, group_id: str) -> List[Payment]:
        oid = await self._require_group(group_id)
        return await self.ledger_repo.list_payments(oid)

    async def _require_group(self, group_id: str) -> ObjectId:
        oid = require_object_id(group_id, "Group")
        if await self.group_repo.get_group(oid) is None:
            raise NotFoundError(f"Group {group_id} not found")
        return oid
