"""
Shared validation helpers for the State Engine.

These checks run on every add_item / reassign_item. They never raise;
a failed check is returned as a Rejection for the caller to hand back.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from bill_splitter.models.bill import ItemSplit, Person
from bill_splitter.models.operations import Rejection, RejectionCode


SPLIT_TOTAL_TOLERANCE = Decimal("0.01")
FULL_SHARE = Decimal("100")


def generate_id() -> str:
    """
    Fresh opaque id for a person or item.

    Random 128-bit values: unique for the life of the process and never
    reused, which is all the engine needs.
    """
    return uuid4().hex


def to_decimal(value) -> Decimal:
    """
    Coerce a number to Decimal.

    Floats go through str() so 0.13 stays 0.13 instead of its binary
    expansion.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def split_total(splits: Iterable[ItemSplit]) -> Decimal:
    return sum((split.percentage for split in splits), Decimal("0"))


def is_full_share(total: Decimal) -> bool:
    """True when total is 100 within SPLIT_TOTAL_TOLERANCE."""
    return abs(total - FULL_SHARE) <= SPLIT_TOTAL_TOLERANCE


def check_splits(
    people: Sequence[Person],
    splits: Sequence[ItemSplit],
) -> Optional[Rejection]:
    """
    Validate a proposed split list against the people on the bill.

    Checks, in order:
    - every split references a known person
    - no person appears twice
    - percentages add up to 100 (+/- 0.01)

    Returns None when the splits are acceptable.
    """
    known = {person.id for person in people}

    unknown = [split.person_id for split in splits if split.person_id not in known]
    if unknown:
        return Rejection(
            code=RejectionCode.UNKNOWN_PERSON,
            message="One or more assigned persons do not exist",
            details={"unknown_person_ids": unknown},
        )

    seen: set[str] = set()
    duplicates = []
    for split in splits:
        if split.person_id in seen:
            duplicates.append(split.person_id)
        seen.add(split.person_id)
    if duplicates:
        return Rejection(
            code=RejectionCode.DUPLICATE_SPLIT,
            message="A person may only appear once in an item's splits",
            details={"duplicate_person_ids": duplicates},
        )

    total = split_total(splits)
    if not is_full_share(total):
        return Rejection(
            code=RejectionCode.INVALID_SPLIT_TOTAL,
            message=f"Splits must sum to 100%, got {total}%",
            details={"split_total": str(total)},
        )

    return None
