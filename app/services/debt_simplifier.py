"""
Debt simplification - turn net balances into settlement edges.

Greedy two-pointer matching: walk the creditors and the debtors side by side
and let the current debtor pay the current creditor as much as both can
absorb. Every step exhausts at least one side, so a group with c creditors
and d debtors never gets more than c + d - 1 edges. The result is not
guaranteed to be the global minimum.

Both sides are ordered by participant id before the walk so identical
balances always give identical edges.
"""

import math
from typing import Dict, List, Tuple

from bson import ObjectId

from app.core.errors import ConsistencyViolationError
from app.models.debt import DUST_THRESHOLD, SettlementEdge


def split_creditors_debtors(
    balances: Dict[ObjectId, float]
) -> Tuple[List[List], List[List]]:
    """
    Separate balances into creditors and debtors.

    Returns two lists of ``[participant_id, remaining]`` pairs, both with a
    positive remaining amount and sorted by participant id. Dust balances
    are dropped.
    Raises ConsistencyViolationError for a non-finite balance.
    """
    creditors = []
    debtors = []

    for participant_id, balance in sorted(balances.items(), key=lambda kv: str(kv[0])):
        if not math.isfinite(balance):
            raise ConsistencyViolationError(
                f"Balance of participant {participant_id} is not finite: {balance}"
            )
        if balance > DUST_THRESHOLD:
            creditors.append([participant_id, balance])
        elif balance < -DUST_THRESHOLD:
            debtors.append([participant_id, -balance])  # Store positive debt amount

    return creditors, debtors


def simplify_debts(balances: Dict[ObjectId, float]) -> List[SettlementEdge]:
    """Compute the settlement edges that bring every balance back to zero."""
    creditors, debtors = split_creditors_debtors(balances)

    edges: List[SettlementEdge] = []
    creditor_idx = 0
    debtor_idx = 0

    while creditor_idx < len(creditors) and debtor_idx < len(debtors):
        creditor = creditors[creditor_idx]
        debtor = debtors[debtor_idx]

        amount = min(creditor[1], debtor[1])
        if amount > DUST_THRESHOLD:
            edges.append(SettlementEdge(
                lender_id=creditor[0],
                debtor_id=debtor[0],
                amount=amount
            ))

        creditor[1] -= amount
        debtor[1] -= amount

        if creditor[1] <= DUST_THRESHOLD:
            creditor_idx += 1
        if debtor[1] <= DUST_THRESHOLD:
            debtor_idx += 1

    return edges
