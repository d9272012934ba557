"""
Versioned Snapshot Schemas

One model per stored snapshot version. Each is deliberately lenient:
fields that older writers might have left out get defaults instead of
failing validation, so the upgrade chain has something to work with.

VERSION HISTORY:
- v0: items owned by exactly one person (assignedTo); tip was
      {tipMode: none|fixed|percentage, tipAmount}. Version tag may be absent.
- v1: items carry a splits list (stray assignedTo still possible).
      Early v1 writers kept the old tip model and no province; later
      ones already wrote tipMode equal|proportional, tipPercentage and
      selectedProvinceId.
- v2: current shape, see StoredBillState.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bill_splitter.models.bill import ItemSplit, Person


CURRENT_STORAGE_VERSION = 2


class _LegacyModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LegacyTipMode:
    """Tip modes of the v0/v1 tip model."""
    NONE = "none"
    FIXED = "fixed"
    PERCENTAGE = "percentage"


# =============================================================================
# v0
# =============================================================================

class ItemV0(_LegacyModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    amount: Decimal = Field(..., ge=0)
    assigned_to: Optional[str] = None
    # A few v0 writers already emitted splits alongside a blank assignedTo
    splits: tuple[ItemSplit, ...] = Field(default_factory=tuple)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0)


class SnapshotV0(_LegacyModel):
    version: Optional[int] = None
    people: tuple[Person, ...] = Field(default_factory=tuple)
    items: tuple[ItemV0, ...] = Field(default_factory=tuple)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0)
    tip_mode: Optional[str] = LegacyTipMode.NONE
    tip_amount: Optional[Decimal] = None


# =============================================================================
# v1
# =============================================================================

class ItemV1(_LegacyModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    amount: Decimal = Field(..., ge=0)
    splits: tuple[ItemSplit, ...] = Field(default_factory=tuple)
    assigned_to: Optional[str] = None
    tax_rate: Optional[Decimal] = Field(default=None, ge=0)


class SnapshotV1(_LegacyModel):
    version: int = 1
    people: tuple[Person, ...] = Field(default_factory=tuple)
    items: tuple[ItemV1, ...] = Field(default_factory=tuple)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0)
    tip_mode: Optional[str] = LegacyTipMode.NONE
    tip_amount: Optional[Decimal] = None
    tip_percentage: Optional[Decimal] = None
    selected_province_id: Optional[str] = None
