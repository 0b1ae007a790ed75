from typing import List
from fastapi import APIRouter, Depends, status
from app.api.deps import get_debt_service, get_settlement_service
from app.schemas.debt import DebtResponse
from app.schemas.payment import PaymentCreate, PaymentResponse, SettlementResponse
from app.services.debt_service import DebtService
from app.services.settlement_service import SettlementService

router = APIRouter()


@router.post("/", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_in: PaymentCreate,
    service: SettlementService = Depends(get_settlement_service)
):
    """Pay a debt (ledger settlement mode); returns the recomputed debts"""
    payment, debts = await service.create_payment(payment_in.debt_id, payment_in.paid_amount)
    return SettlementResponse(
        payment=PaymentResponse.model_validate(payment) if payment else None,
        debts=[DebtResponse.model_validate(debt) for debt in debts]
    )


@router.get("/group/{group_id}", response_model=List[PaymentResponse])
async def list_group_payments(
    group_id: str,
    service: DebtService = Depends(get_debt_service)
):
    """Payment history of a group, newest first"""
    payments = await service.list_payments(group_id)
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.delete("/{payment_id}", response_model=List[DebtResponse])
async def delete_payment(
    payment_id: str,
    service: SettlementService = Depends(get_settlement_service)
):
    """Remove a payment from the ledger; returns the recomputed debts"""
    debts = await service.delete_payment(payment_id)
    return [DebtResponse.model_validate(debt) for debt in debts]
