"""Participant name validation utilities."""
from typing import Iterable, List

from app.core.errors import InvalidArgumentError


def clean_participant_names(names: Iterable[str], taken: Iterable[str] = ()) -> List[str]:
    """
    Strip participant names and check them.

    Names must be non-empty and unique within the group, including against
    the names already ``taken`` by existing members.
    """
    cleaned = [name.strip() for name in names]
    if any(not name for name in cleaned):
        raise InvalidArgumentError("Participant names cannot be empty")

    seen = set(taken)
    for name in cleaned:
        if name in seen:
            raise InvalidArgumentError(f"Participant name {name!r} is already used in this group")
        seen.add(name)
    return cleaned
