from typing import List
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from app.models.expense import SplitType
from app.schemas.common import Amount, Money, ObjectIdStr


class SplitIn(BaseModel):
    participant_id: str
    amount: Amount


class ExpenseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    emoji: str = ""
    cost: Amount
    payer_id: str
    split_type: SplitType = SplitType.EQUAL
    splits: List[SplitIn]


class ExpenseCreate(ExpenseBase):
    group_id: str


class ExpenseUpdate(ExpenseBase):
    """Full replacement of an expense; the group cannot change."""
    pass


class SplitResponse(BaseModel):
    participant_id: ObjectIdStr
    amount: Money

    model_config = ConfigDict(from_attributes=True)


class ExpenseResponse(BaseModel):
    id: ObjectIdStr
    group_id: ObjectIdStr
    name: str
    emoji: str
    cost: Money
    payer_id: ObjectIdStr
    split_type: SplitType
    splits: List[SplitResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
