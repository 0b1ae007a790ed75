"""
Expense model - what was paid, by whom, and who owes which part of it.

Splits are embedded in the expense document and already hold absolute
amounts: the split policy (equal, amount, shares, percentage) is resolved by
the client before the expense reaches the API.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict

from app.models.base import MongoModel, PyObjectId


class SplitType(str, Enum):
    EQUAL = "equal"
    AMOUNT = "amount"
    SHARES = "shares"
    PERCENTAGE = "percentage"


# Embedded documents don't need MongoModel (no separate _id)
class Split(BaseModel):
    participant_id: PyObjectId
    amount: float


class Expense(MongoModel):
    """
    Invariant: sum(split.amount) equals cost within 0.01.
    """
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    group_id: PyObjectId
    name: str
    emoji: str = ""
    cost: float
    payer_id: PyObjectId
    split_type: SplitType = SplitType.EQUAL
    splits: List[Split] = []

    def split_total(self) -> float:
        return sum(split.amount for split in self.splits)
