import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.main import app
from app.services.debt_service import DebtService
from app.services.expense_service import ExpenseService
from app.services.group_service import GroupService
from app.services.participant_service import ParticipantService
from app.services.recompute_service import RecomputeService
from app.services.settlement_service import SettlementService


@pytest.fixture
def settlement_mode():
    return "ledger"


@pytest.fixture
def client(mock_db, store, locks, settlement_mode):
    """
    Test client backed by the in-memory store.

    Entered without a context manager so the lifespan (MongoDB connection)
    does not run.
    """
    recompute = RecomputeService(mock_db, ledger_repo=store, mode=settlement_mode, locks=locks)

    app.dependency_overrides[deps.get_group_service] = lambda: GroupService(mock_db, group_repo=store)
    app.dependency_overrides[deps.get_expense_service] = lambda: ExpenseService(
        mock_db, expense_repo=store, group_repo=store, recompute_service=recompute, locks=locks
    )
    app.dependency_overrides[deps.get_participant_service] = lambda: ParticipantService(
        mock_db, group_repo=store, expense_repo=store, ledger_repo=store,
        recompute_service=recompute, locks=locks
    )
    app.dependency_overrides[deps.get_debt_service] = lambda: DebtService(
        mock_db, ledger_repo=store, group_repo=store
    )
    app.dependency_overrides[deps.get_settlement_service] = lambda: SettlementService(
        mock_db, ledger_repo=store, recompute_service=recompute, mode=settlement_mode, locks=locks
    )

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
