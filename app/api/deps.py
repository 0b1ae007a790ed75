from fastapi import Depends

from app.db.mongo import get_db
from app.services.debt_service import DebtService
from app.services.expense_service import ExpenseService
from app.services.group_service import GroupService
from app.services.participant_service import ParticipantService
from app.services.settlement_service import SettlementService


def get_group_service(db=Depends(get_db)) -> GroupService:
    return GroupService(db)


def get_expense_service(db=Depends(get_db)) -> ExpenseService:
    return ExpenseService(db)


def get_participant_service(db=Depends(get_db)) -> ParticipantService:
    return ParticipantService(db)


def get_debt_service(db=Depends(get_db)) -> DebtService:
    return DebtService(db)


def get_settlement_service(db=Depends(get_db)) -> SettlementService:
    return SettlementService(db)
