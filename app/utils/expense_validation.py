"""Expense validation utilities."""
import math
from typing import Iterable, List

from bson import ObjectId

from app.core.errors import InvalidArgumentError
from app.models.debt import DUST_THRESHOLD
from app.models.expense import Split


def validate_cost(cost: float) -> None:
    """Expense cost must be a finite, strictly positive number."""
    if not math.isfinite(cost):
        raise InvalidArgumentError(f"Expense cost must be a finite number, got {cost}")
    if cost <= 0:
        raise InvalidArgumentError(f"Expense cost must be positive, got {cost}")


def validate_splits(cost: float, splits: List[Split]) -> None:
    """
    Validate the splits of an expense.

    Rules:
    - at least one split
    - each participant appears at most once
    - no negative or non-finite split amount
    - split amounts sum to the cost within 0.01
    """
    if not math.isfinite(cost):
        raise InvalidArgumentError(f"Expense cost must be a finite number, got {cost}")
    if not splits:
        raise InvalidArgumentError("Expense must be split between at least one participant")

    seen = set()
    for split in splits:
        if split.participant_id in seen:
            raise InvalidArgumentError(
                f"Participant {split.participant_id} appears in more than one split"
            )
        seen.add(split.participant_id)

        if not math.isfinite(split.amount):
            raise InvalidArgumentError(
                f"Split for participant {split.participant_id} is not a finite amount: {split.amount}"
            )
        if split.amount < 0:
            raise InvalidArgumentError(
                f"Split for participant {split.participant_id} has negative amount: {split.amount}"
            )

    split_sum = sum(split.amount for split in splits)
    if abs(split_sum - cost) > DUST_THRESHOLD:
        raise InvalidArgumentError(
            f"Splits sum to {split_sum:.2f} but expense cost is {cost:.2f}"
        )


def validate_members(
    payer_id: ObjectId, splits: List[Split], member_ids: Iterable[ObjectId]
) -> None:
    """Payer and every split participant must belong to the expense's group."""
    members = set(member_ids)
    if payer_id not in members:
        raise InvalidArgumentError(f"Payer {payer_id} is not a participant of this group")
    for split in splits:
        if split.participant_id not in members:
            raise InvalidArgumentError(
                f"Split participant {split.participant_id} is not a participant of this group"
            )
