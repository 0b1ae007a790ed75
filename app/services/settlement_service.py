"""
SettlementService - records payments against debts.

Two settlement models exist and a deployment uses exactly one of them
(``settings.SETTLEMENT_MODE``):

- ledger:  a payment is appended to the payment ledger and the group's debts
           are recomputed, so the settled debt disappears from the result.
- tracked: the debt keeps a paid_amount that is overwritten in place; the
           increase, if any, is appended to the payment ledger as history.
"""

import logging
import math
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.errors import InvalidArgumentError, NotFoundError, SettlementModeError
from app.db.session import start_transaction
from app.models.debt import Debt
from app.models.payment import Payment
from app.repositories.ledger_repo import LedgerRepository
from app.services.recompute_service import (
    LEDGER_MODE,
    TRACKED_MODE,
    GroupLocks,
    RecomputeService,
    group_locks,
)
from app.utils.ids import require_object_id

logger = logging.getLogger(__name__)


def _cents(value: float) -> float:
    return round(value, 2)


class SettlementService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        ledger_repo: Optional[LedgerRepository] = None,
        recompute_service: Optional[RecomputeService] = None,
        mode: Optional[str] = None,
        locks: Optional[GroupLocks] = None
    ):
        self.db = db
        self.ledger_repo = ledger_repo or LedgerRepository(db)
        self.mode = mode or settings.SETTLEMENT_MODE
        self.locks = locks or group_locks
        self.recompute_service = recompute_service or RecomputeService(
            db, ledger_repo=self.ledger_repo, mode=self.mode, locks=self.locks
        )

    async def create_payment(self, debt_id: str, paid_amount: float) -> Tuple[Optional[Payment], List[Debt]]:
        """
        Pay (part of) a debt in ledger mode.

        Inserts a payment from the debtor to the lender and recomputes the
        group's debts in the same transaction. A zero amount records nothing.

        Returns the payment (None for a zero amount) and the group's debts.
        """
        self._require_mode(LEDGER_MODE, "create_payment")
        debt = await self._load_debt(debt_id)
        self._validate_amount(paid_amount, debt)

        async with self.locks.hold(debt.group_id):
            async with start_transaction(self.db) as session:
                # A recompute may have replaced the debt since it was read
                debt = await self._load_debt(debt_id, session=session)
                self._validate_amount(paid_amount, debt)

                if paid_amount == 0:
                    return None, await self.ledger_repo.list_debts(debt.group_id, session=session)

                payment = Payment(
                    group_id=debt.group_id,
                    payer_id=debt.debtor_id,
                    payee_id=debt.lender_id,
                    amount=paid_amount
                )
                await self.ledger_repo.insert_payment(payment, session=session)
                debts = await self.recompute_service.on_payment_recorded(debt.group_id, session=session)

        logger.info(
            "Payment %s: %s paid %s %.2f in group %s",
            payment.id, payment.payer_id, payment.payee_id, payment.amount, payment.group_id
        )
        return payment, debts

    async def update_debt_paid_amount(self, debt_id: str, paid_amount: float) -> Tuple[Debt, Optional[Payment]]:
        """
        Set the paid amount of a debt in tracked mode.

        No recompute happens. When the paid amount grows, the difference is
        appended to the payment ledger; a decrease records nothing.
        """
        self._require_mode(TRACKED_MODE, "update_debt_paid_amount")
        debt = await self._load_debt(debt_id)
        self._validate_amount(paid_amount, debt)

        async with self.locks.hold(debt.group_id):
            async with start_transaction(self.db) as session:
                debt = await self._load_debt(debt_id, session=session)
                self._validate_amount(paid_amount, debt)

                delta = paid_amount - debt.paid_amount
                updated = await self.ledger_repo.set_debt_paid_amount(debt.id, paid_amount, session=session)
                if updated is None:
                    raise NotFoundError(f"Debt {debt_id} not found")

                payment = None
                if delta > 0:
                    payment = Payment(
                        group_id=debt.group_id,
                        payer_id=debt.debtor_id,
                        payee_id=debt.lender_id,
                        amount=delta
                    )
                    await self.ledger_repo.insert_payment(payment, session=session)

        logger.info(
            "Debt %s paid amount %.2f -> %.2f (delta %.2f)",
            debt.id, debt.paid_amount, paid_amount, delta
        )
        return updated, payment

    async def delete_payment(self, payment_id: str) -> List[Debt]:
        """Remove a payment from the ledger and recompute the group's debts."""
        self._require_mode(LEDGER_MODE, "delete_payment")
        oid = require_object_id(payment_id, "Payment")
        payment = await self.ledger_repo.get_payment(oid)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")

        async with self.locks.hold(payment.group_id):
            async with start_transaction(self.db) as session:
                if not await self.ledger_repo.delete_payment(oid, session=session):
                    raise NotFoundError(f"Payment {payment_id} not found")
                debts = await self.recompute_service.on_payment_recorded(payment.group_id, session=session)

        logger.info("Payment %s deleted from group %s", oid, payment.group_id)
        return debts

    # ===== PRIVATE HELPERS =====

    def _require_mode(self, mode: str, operation: str) -> None:
        if self.mode != mode:
            raise SettlementModeError(
                f"{operation} is not available: settlement mode is '{self.mode}'"
            )

    async def _load_debt(self, debt_id: str, session=None) -> Debt:
        oid = require_object_id(debt_id, "Debt")
        debt = await self.ledger_repo.get_debt(oid, session=session)
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    @staticmethod
    def _validate_amount(amount: float, debt: Debt) -> None:
        limit = debt.amount
        if not math.isfinite(amount):
            logger.warning("Rejected non-finite payment %s for debt %s", amount, debt.id)
            raise InvalidArgumentError("Paid amount must be a finite number")
        if amount < 0:
            logger.warning("Rejected negative payment %.2f for debt %s", amount, debt.id)
            raise InvalidArgumentError("Paid amount cannot be negative")
        if _cents(amount) > _cents(limit):
            logger.warning("Rejected payment %.2f above %.2f for debt %s", amount, limit, debt.id)
            raise InvalidArgumentError(
                f"Paid amount ({amount:.2f}) cannot exceed debt amount ({limit:.2f})"
            )
