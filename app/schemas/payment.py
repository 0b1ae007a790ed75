from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from app.schemas.common import Amount, Money, ObjectIdStr
from app.schemas.debt import DebtResponse


class PaymentCreate(BaseModel):
    """Settle (part of) a debt; the payment goes from its debtor to its lender."""
    debt_id: str
    paid_amount: Amount


class PaymentResponse(BaseModel):
    id: ObjectIdStr
    group_id: ObjectIdStr
    payer_id: ObjectIdStr
    payee_id: ObjectIdStr
    amount: Money
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettlementResponse(BaseModel):
    """Recorded payment (None for a zero amount) and the group's debts after it."""
    payment: Optional[PaymentResponse] = None
    debts: List[DebtResponse]


class DebtSettlementResponse(BaseModel):
    """Debt after a paid-amount update and the payment it produced, if any."""
    debt: DebtResponse
    payment: Optional[PaymentResponse] = None
