"""
Core Data Models for Bill Splitter

These models define the strict schemas for the bill and everything it owns.
They are designed to:
1. Be immutable - every edit produces a new BillState
2. Keep money exact (Decimal, never float)
3. Serialize to the camelCase snapshot shape used by the stored slot

DESIGN DECISION: We use Pydantic v2 frozen models with tuple collections.
A BillState can be shared freely between readers while a new one is built.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TipMode(str, Enum):
    """
    How the tip is shared out.

    PROPORTIONAL: each person tips in proportion to their subtotal.
    EQUAL: contributors split the tip evenly.
    """
    EQUAL = "equal"
    PROPORTIONAL = "proportional"


class _SnapshotModel(BaseModel):
    """Base for models that round-trip through the stored snapshot."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# BILL AGGREGATE
# =============================================================================

class Person(_SnapshotModel):
    """Someone at the table."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="", description="Display name")


class ItemSplit(_SnapshotModel):
    """
    One person's share of one item.

    Lives only inside Item.splits; a person appears at most once per item.
    """

    person_id: str = Field(..., min_length=1)
    percentage: Decimal = Field(
        ...,
        gt=0,
        # 100 plus the split tolerance, so a merged share stays loadable
        le=Decimal("100.01"),
        description="Share of the item in percent (50 == half)"
    )


class Item(_SnapshotModel):
    """
    A line item on the bill.

    tax_rate is captured from the bill when the item is created and is
    frozen from then on; later changes to the global rate do not touch it.
    An empty splits tuple is allowed transiently and contributes nothing.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Price of the item"
    )
    splits: tuple[ItemSplit, ...] = Field(default_factory=tuple)
    tax_rate: Decimal = Field(
        ...,
        ge=0,
        description="Tax rate as a fraction (0.13 == 13%)"
    )

    @property
    def split_total(self) -> Decimal:
        """Sum of split percentages."""
        return sum((split.percentage for split in self.splits), Decimal("0"))

    def split_for(self, person_id: str) -> Optional[ItemSplit]:
        """The split belonging to person_id, if any."""
        for split in self.splits:
            if split.person_id == person_id:
                return split
        return None


class BillState(_SnapshotModel):
    """
    The whole bill.

    This is the single root aggregate. People and items have no life
    outside it. tax_rate is only the default applied to new items.
    """

    people: tuple[Person, ...] = Field(default_factory=tuple)
    items: tuple[Item, ...] = Field(default_factory=tuple)
    tax_rate: Decimal = Field(
        ...,
        ge=0,
        description="Default tax rate for new items"
    )
    selected_province_id: str = Field(
        ...,
        description="Tax preset id, or 'custom' for a user-entered rate"
    )
    tip_mode: TipMode = Field(default=TipMode.PROPORTIONAL)
    tip_percentage: Decimal = Field(
        ...,
        ge=0,
        description="Tip as a fraction of the subtotal (0.18 == 18%)"
    )

    def find_person(self, person_id: str) -> Optional[Person]:
        for person in self.people:
            if person.id == person_id:
                return person
        return None

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def has_person(self, person_id: str) -> bool:
        return self.find_person(person_id) is not None

    def items_for_person(self, person_id: str) -> list[Item]:
        """Items with a split referencing person_id."""
        return [item for item in self.items if item.split_for(person_id) is not None]


class StoredBillState(BillState):
    """
    A BillState tagged with the snapshot version it was written with.

    This is the only shape ever written to storage.
    """

    version: int = Field(..., ge=0)

    def to_bill_state(self) -> BillState:
        return BillState.model_validate(self.model_dump(exclude={"version"}))

    def to_snapshot(self) -> dict:
        """Plain JSON-ready dict in the camelCase wire shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# PARTIAL UPDATES
# =============================================================================

class PersonUpdate(BaseModel):
    """Fields of a Person that update_person may change."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = None


class ItemUpdate(BaseModel):
    """
    Fields of an Item that update_item may change.

    tax_rate is deliberately absent: it is frozen when the item is added.
    Changing splits here skips the 100% check - use reassign_item for that.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    splits: Optional[tuple[ItemSplit, ...]] = None


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class PersonBillShare(BaseModel):
    """What one person owes, rounded to cents."""
    model_config = ConfigDict(frozen=True)

    person_id: str
    name: str
    subtotal: Decimal
    tax: Decimal
    tip: Decimal
    total: Decimal


class BillTotals(BaseModel):
    """Sums of the rounded per-person figures."""
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    tip: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")


class BillSummary(BaseModel):
    """
    Per-person and aggregate breakdown of a bill.

    per_person follows the order of BillState.people.
    """
    model_config = ConfigDict(frozen=True)

    per_person: tuple[PersonBillShare, ...] = Field(default_factory=tuple)
    totals: BillTotals = Field(default_factory=BillTotals)

    def share_for(self, person_id: str) -> Optional[PersonBillShare]:
        for share in self.per_person:
            if share.person_id == person_id:
                return share
        return None
