from typing import List

from pydantic import BaseModel, ConfigDict

from app.models.expense import Expense
from app.models.group import Group, Participant
from app.models.payment import Payment


class GroupLedger(BaseModel):
    """Snapshot of everything balances are derived from, for one group."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    group: Group
    participants: List[Participant] = []
    expenses: List[Expense] = []
    payments: List[Payment] = []
