from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from app.core.errors import NotFoundError
from app.models.debt import Debt
from app.models.expense import Expense, Split
from app.models.group import Group, Participant
from app.models.ledger import GroupLedger
from app.models.payment import Payment
from app.services.recompute_service import GroupLocks


class InMemoryStore:
    """
    In-memory stand-in for the Mongo repositories.

    Implements the methods of LedgerRepository, GroupRepository and
    ExpenseRepository so one instance can be handed to every service.
    Stored models are copied on the way in and out.
    """

    def __init__(self):
        self.groups: Dict[ObjectId, Group] = {}
        self.participants: Dict[ObjectId, Participant] = {}
        self.expenses: Dict[ObjectId, Expense] = {}
        self.payments: Dict[ObjectId, Payment] = {}
        self.debts: Dict[ObjectId, Debt] = {}

    # ----- groups / participants -----

    async def create_group(self, group, participants, session=None):
        self.groups[group.id] = group.model_copy(deep=True)
        for participant in participants:
            self.participants[participant.id] = participant.model_copy(deep=True)
        return group

    async def get_group(self, group_id, session=None) -> Optional[Group]:
        group = self.groups.get(group_id)
        return group.model_copy(deep=True) if group else None

    async def list_participants(self, group_id, session=None) -> List[Participant]:
        return [p.model_copy(deep=True) for p in self.participants.values() if p.group_id == group_id]

    async def get_participant(self, participant_id, session=None) -> Optional[Participant]:
        participant = self.participants.get(participant_id)
        return participant.model_copy(deep=True) if participant else None

    async def add_participant(self, participant, session=None):
        self.participants[participant.id] = participant.model_copy(deep=True)
        return participant

    async def rename_participant(self, participant_id, name, session=None) -> Optional[Participant]:
        participant = self.participants.get(participant_id)
        if participant is None:
            return None
        participant.name = name
        return participant.model_copy(deep=True)

    async def delete_participant(self, participant_id, session=None) -> bool:
        return self.participants.pop(participant_id, None) is not None

    # ----- expenses -----

    async def create_expense(self, expense, session=None):
        self.expenses[expense.id] = expense.model_copy(deep=True)
        return expense

    async def get_expense(self, expense_id, session=None) -> Optional[Expense]:
        expense = self.expenses.get(expense_id)
        return expense.model_copy(deep=True) if expense else None

    async def replace_expense(self, expense, session=None) -> Optional[Expense]:
        if expense.id not in self.expenses:
            return None
        self.expenses[expense.id] = expense.model_copy(deep=True)
        return expense

    async def delete_expense(self, expense_id, session=None) -> bool:
        return self.expenses.pop(expense_id, None) is not None

    async def list_group_expenses(self, group_id, session=None) -> List[Expense]:
        expenses = [e.model_copy(deep=True) for e in self.expenses.values() if e.group_id == group_id]
        return sorted(expenses, key=lambda e: e.created_at, reverse=True)

    async def list_expenses_involving(self, participant_id, session=None) -> List[Expense]:
        return [
            e.model_copy(deep=True) for e in self.expenses.values()
            if e.payer_id == participant_id or any(s.participant_id == participant_id for s in e.splits)
        ]

    # ----- ledger -----

    async def load_group_ledger(self, group_id, session=None) -> GroupLedger:
        if group_id not in self.groups:
            raise NotFoundError(f"Group {group_id} not found")
        return GroupLedger(
            group=self.groups[group_id].model_copy(deep=True),
            participants=await self.list_participants(group_id),
            expenses=[e.model_copy(deep=True) for e in self.expenses.values() if e.group_id == group_id],
            payments=[p.model_copy(deep=True) for p in self.payments.values() if p.group_id == group_id]
        )

    async def list_debts(self, group_id, session=None) -> List[Debt]:
        return [d.model_copy(deep=True) for d in self.debts.values() if d.group_id == group_id]

    async def replace_group_debts(self, group_id, debts, session=None):
        self.debts = {k: d for k, d in self.debts.items() if d.group_id != group_id}
        for debt in debts:
            self.debts[debt.id] = debt.model_copy(deep=True)
        return debts

    async def get_debt(self, debt_id, session=None) -> Optional[Debt]:
        debt = self.debts.get(debt_id)
        return debt.model_copy(deep=True) if debt else None

    async def set_debt_paid_amount(self, debt_id, paid_amount, session=None) -> Optional[Debt]:
        debt = self.debts.get(debt_id)
        if debt is None:
            return None
        debt.paid_amount = paid_amount
        return debt.model_copy(deep=True)

    async def delete_debts_involving(self, participant_id, session=None) -> int:
        doomed = [k for k, d in self.debts.items() if d.involves(participant_id)]
        for key in doomed:
            del self.debts[key]
        return len(doomed)

    async def insert_payment(self, payment, session=None):
        self.payments[payment.id] = payment.model_copy(deep=True)
        return payment

    async def get_payment(self, payment_id, session=None) -> Optional[Payment]:
        payment = self.payments.get(payment_id)
        return payment.model_copy(deep=True) if payment else None

    async def list_payments(self, group_id, session=None) -> List[Payment]:
        payments = [p.model_copy(deep=True) for p in self.payments.values() if p.group_id == group_id]
        return sorted(payments, key=lambda p: p.created_at, reverse=True)

    async def delete_payment(self, payment_id, session=None) -> bool:
        return self.payments.pop(payment_id, None) is not None

    async def delete_payments_involving(self, participant_id, session=None) -> int:
        doomed = [k for k, p in self.payments.items() if participant_id in (p.payer_id, p.payee_id)]
        for key in doomed:
            del self.payments[key]
        return len(doomed)

    # ----- seeding helpers (synchronous) -----

    def add_group(self, *names: str):
        group = Group(name="Trip")
        self.groups[group.id] = group
        participants = []
        for name in names:
            participant = Participant(name=name, group_id=group.id)
            self.participants[participant.id] = participant
            participants.append(participant)
        return group, participants

    def add_expense(self, group, payer, cost, shares) -> Expense:
        """shares: list of (participant, amount)"""
        expense = Expense(
            group_id=group.id,
            name="Expense",
            cost=cost,
            payer_id=payer.id,
            splits=[Split(participant_id=p.id, amount=amount) for p, amount in shares]
        )
        self.expenses[expense.id] = expense
        return expense

    def add_payment(self, group, payer, payee, amount) -> Payment:
        payment = Payment(group_id=group.id, payer_id=payer.id, payee_id=payee.id, amount=amount)
        self.payments[payment.id] = payment
        return payment

    def add_debt(self, group, lender, debtor, amount, paid_amount=0.0) -> Debt:
        debt = Debt(
            group_id=group.id,
            lender_id=lender.id,
            debtor_id=debtor.id,
            amount=amount,
            paid_amount=paid_amount
        )
        self.debts[debt.id] = debt
        return debt


def _async_context(value=None) -> MagicMock:
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=value)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.start_transaction = MagicMock(return_value=_async_context())
    return session


@pytest.fixture
def mock_db(mock_session):
    """Motor database mock whose client opens a session with a working transaction."""
    db = MagicMock()
    db.client.start_session = AsyncMock(return_value=_async_context(mock_session))
    return db


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def locks():
    return GroupLocks()


@pytest.fixture
def trio(store):
    """Group with participants Alice, Bob and Charlie (ids ascending in that order)."""
    group, (alice, bob, charlie) = store.add_group("Alice", "Bob", "Charlie")
    return group, alice, bob, charlie
