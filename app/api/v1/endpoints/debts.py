from typing import List
from fastapi import APIRouter, Depends
from app.api.deps import get_debt_service, get_settlement_service
from app.schemas.debt import DebtPaidAmountUpdate, DebtResponse, ParticipantBalanceResponse
from app.schemas.payment import DebtSettlementResponse, PaymentResponse
from app.services.debt_service import DebtService
from app.services.settlement_service import SettlementService

router = APIRouter()


@router.get("/group/{group_id}", response_model=List[DebtResponse])
async def list_group_debts(
    group_id: str,
    outstanding_only: bool = False,
    service: DebtService = Depends(get_debt_service)
):
    """Current simplified debts of a group"""
    debts = await service.get_group_debts(group_id, outstanding_only=outstanding_only)
    return [DebtResponse.model_validate(debt) for debt in debts]


@router.get("/group/{group_id}/balance/{participant_id}", response_model=ParticipantBalanceResponse)
async def get_participant_balance(
    group_id: str,
    participant_id: str,
    service: DebtService = Depends(get_debt_service)
):
    """Net balance of one participant from the group's debts"""
    return await service.get_participant_balance(group_id, participant_id)


@router.put("/{debt_id}/paid-amount", response_model=DebtSettlementResponse)
async def update_debt_paid_amount(
    debt_id: str,
    payload: DebtPaidAmountUpdate,
    service: SettlementService = Depends(get_settlement_service)
):
    """Set how much of a debt has been paid (tracked settlement mode)"""
    debt, payment = await service.update_debt_paid_amount(debt_id, payload.paid_amount)
    return DebtSettlementResponse(
        debt=DebtResponse.model_validate(debt),
        payment=PaymentResponse.model_validate(payment) if payment else None
    )
