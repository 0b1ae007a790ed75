from pydantic import BaseModel, ConfigDict
from app.schemas.common import Amount, Money, ObjectIdStr


class DebtResponse(BaseModel):
    """Settlement edge: debtor owes lender amount - paid_amount."""
    id: ObjectIdStr
    group_id: ObjectIdStr
    lender_id: ObjectIdStr
    debtor_id: ObjectIdStr
    amount: Money
    paid_amount: Money

    model_config = ConfigDict(from_attributes=True)


class DebtPaidAmountUpdate(BaseModel):
    """Request body to set the paid amount of a debt (tracked mode)."""
    paid_amount: Amount


class ParticipantBalanceResponse(BaseModel):
    participant_id: ObjectIdStr
    owes: Money
    is_owed: Money
    net: Money
