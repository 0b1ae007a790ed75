"""
Balance aggregation - reduce a group ledger to one signed balance per participant.

Positive balance = the group owes this participant (creditor).
Negative balance = this participant owes the group (debtor).

Example (Alice, Bob, Charlie):
    Alice pays 30 for dinner, split 10/10/10   -> A +20, B -10, C -10
    Bob pays 24 for gas, split 8/8/8           -> A +12, B +6,  C -18
"""

import logging
import math
from typing import Dict

from bson import ObjectId

from app.core.errors import ConsistencyViolationError
from app.models.debt import DUST_THRESHOLD
from app.models.ledger import GroupLedger

logger = logging.getLogger(__name__)


def aggregate_balances(ledger: GroupLedger, include_payments: bool = True) -> Dict[ObjectId, float]:
    """
    Compute the net balance of every participant of the group.

    Algorithm:
    1. Every participant starts at 0
    2. The payer of an expense is credited its full cost
    3. Every split debits its participant by the split amount
    4. Payments (only when include_payments): the payer is credited and the
       payee debited by the amount paid

    Raises ConsistencyViolationError when the result cannot sum to zero.
    """
    balances: Dict[ObjectId, float] = {p.id: 0.0 for p in ledger.participants}

    for expense in ledger.expenses:
        drift = expense.cost - expense.split_total()
        if not abs(drift) <= DUST_THRESHOLD:
            _violation(
                f"Expense {expense.id} splits sum to {expense.split_total():.2f} "
                f"but cost is {expense.cost:.2f}"
            )

        _credit(balances, expense.payer_id, expense.cost)
        for split in expense.splits:
            _credit(balances, split.participant_id, -split.amount)

    if include_payments:
        for payment in ledger.payments:
            _credit(balances, payment.payer_id, payment.amount)
            _credit(balances, payment.payee_id, -payment.amount)

    non_finite = [pid for pid, balance in balances.items() if not math.isfinite(balance)]
    if non_finite:
        _violation(f"Balances of group {ledger.group.id} are not finite for {non_finite}")

    total = sum(balances.values())
    # Each expense may legitimately drift by up to one cent
    tolerance = DUST_THRESHOLD * max(1, len(ledger.expenses))
    if not abs(total) <= tolerance:
        _violation(f"Balances of group {ledger.group.id} sum to {total:.4f}, expected 0")

    return balances


def _credit(balances: Dict[ObjectId, float], participant_id: ObjectId, amount: float) -> None:
    if participant_id not in balances:
        _violation(f"Ledger references participant {participant_id} outside the group")
    balances[participant_id] += amount


def _violation(message: str) -> None:
    logger.error("Consistency violation: %s", message)
    raise ConsistencyViolationError(message)
