import math

import pytest
from bson import ObjectId

from app.core.errors import InvalidArgumentError
from app.models.expense import Split
from app.utils.expense_validation import validate_cost, validate_splits
from app.utils.participant_validation import clean_participant_names


@pytest.mark.parametrize("cost", [math.inf, -math.inf, math.nan])
def test_non_finite_cost_rejected(cost):
    with pytest.raises(InvalidArgumentError):
        validate_cost(cost)


@pytest.mark.parametrize("cost,amount", [
    (math.inf, math.inf),
    (10.0, math.nan),
    (10.0, math.inf),
    (math.nan, math.nan),
])
def test_non_finite_split_rejected(cost, amount):
    splits = [Split(participant_id=ObjectId(), amount=amount)]

    with pytest.raises(InvalidArgumentError):
        validate_splits(cost, splits)


def test_finite_splits_accepted():
    splits = [Split(participant_id=ObjectId(), amount=33.33), Split(participant_id=ObjectId(), amount=66.67)]

    validate_splits(100.0, splits)


def test_participant_names_are_stripped():
    assert clean_participant_names([" Alice ", "Bob"]) == ["Alice", "Bob"]


@pytest.mark.parametrize("names,taken", [
    (["Alice", "Alice"], []),
    (["Alice", " "], []),
    (["Bob"], ["Bob"]),
    ([" Bob"], ["Alice", "Bob"]),
])
def test_participant_names_rejected(names, taken):
    with pytest.raises(InvalidArgumentError):
        clean_participant_names(names, taken=taken)
