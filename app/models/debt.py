"""
Debt model - simplified obligations derived from the group ledger.

Design principles:
- Derived, never a source of truth: each recompute deletes and regenerates
  every debt of the group, so a debt id does not survive a recompute
- One debt per (lender, debtor) settlement edge
- paid_amount only moves in the "tracked" settlement mode; in the "ledger"
  mode payments are folded back into the balances and it stays 0
"""

from pydantic import BaseModel

from app.models.base import MongoModel, PyObjectId

# Balances and remainders at or below this are treated as settled
DUST_THRESHOLD = 0.01


class SettlementEdge(BaseModel):
    """Output of the simplifier: debtor pays lender ``amount``."""
    lender_id: PyObjectId
    debtor_id: PyObjectId
    amount: float


class Debt(MongoModel):
    """
    Invariants:
    - 0 <= paid_amount <= amount
    - outstanding iff amount - paid_amount > DUST_THRESHOLD
    """
    group_id: PyObjectId
    lender_id: PyObjectId
    debtor_id: PyObjectId
    amount: float
    paid_amount: float = 0.0

    def open_amount(self) -> float:
        """How much remains unpaid."""
        return self.amount - self.paid_amount

    def is_outstanding(self) -> bool:
        return self.open_amount() > DUST_THRESHOLD

    def involves(self, participant_id) -> bool:
        return participant_id in (self.lender_id, self.debtor_id)
