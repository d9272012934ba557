"""
Snapshot Migration

Turns whatever was found in the stored slot into a current BillState.

DESIGN DECISION: Upgrades are an ordered chain of pure, single-boundary
steps (v0 -> v1 -> v2), never a "parse anything" function. A v0
snapshot always walks through every step, and each step can be tested
on its own.

Migration never raises. A snapshot that is not a record, carries an
unknown version, or fails its version's schema is replaced by a fresh
default bill and reported through MigrationResult.warnings.
"""

from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bill_splitter.config.settings import SplitterSettings, get_settings
from bill_splitter.config.tax_presets import CUSTOM_TAX_PRESET_ID, get_tax_preset
from bill_splitter.migration.snapshots import (
    CURRENT_STORAGE_VERSION,
    ItemV0,
    ItemV1,
    LegacyTipMode,
    SnapshotV0,
    SnapshotV1,
)
from bill_splitter.models.bill import (
    BillState,
    Item,
    ItemSplit,
    StoredBillState,
    TipMode,
)


class MigrationResult(BaseModel):
    """Outcome of migrating one raw snapshot."""
    model_config = ConfigDict(frozen=True)

    state: BillState
    source_version: Optional[int] = None
    target_version: int = CURRENT_STORAGE_VERSION
    steps: tuple[str, ...] = Field(default_factory=tuple)
    warnings: tuple[str, ...] = Field(default_factory=tuple)
    fell_back: bool = False

    @property
    def migrated(self) -> bool:
        return bool(self.steps)


# =============================================================================
# DEFAULTS & STORAGE TAGGING
# =============================================================================

def get_initial_bill_state(settings: Optional[SplitterSettings] = None) -> BillState:
    """A fresh, empty bill using the configured defaults."""
    settings = settings or get_settings()
    return BillState(
        people=(),
        items=(),
        tax_rate=settings.default_tax_rate,
        selected_province_id=settings.default_province_id,
        tip_mode=TipMode.PROPORTIONAL,
        tip_percentage=settings.default_tip_percentage,
    )


def prepare_for_storage(state: BillState) -> StoredBillState:
    """Attach the current version tag before a write."""
    return StoredBillState(**dict(state), version=CURRENT_STORAGE_VERSION)


# =============================================================================
# UPGRADE STEPS
# =============================================================================

def _owner_split(assigned_to: Optional[str]) -> tuple[ItemSplit, ...]:
    if not assigned_to:
        return ()
    return (ItemSplit(person_id=assigned_to, percentage=Decimal("100")),)


def upgrade_v0_to_v1(snapshot: SnapshotV0) -> SnapshotV1:
    """Single-owner items become one 100% split."""
    items = tuple(
        ItemV1(
            id=item.id,
            name=item.name,
            amount=item.amount,
            splits=_owner_split(item.assigned_to) or item.splits,
            tax_rate=item.tax_rate,
        )
        for item in snapshot.items
    )
    return SnapshotV1(
        version=1,
        people=snapshot.people,
        items=items,
        tax_rate=snapshot.tax_rate,
        tip_mode=snapshot.tip_mode,
        tip_amount=snapshot.tip_amount,
    )


def _legacy_tip_percentage(tip_mode: Optional[str], tip_amount: Optional[Decimal]) -> Decimal:
    # Only "percentage" carried a rate; tipAmount 15 meant 15%.
    if tip_mode != LegacyTipMode.PERCENTAGE or tip_amount is None:
        return Decimal("0")
    return max(Decimal("0"), tip_amount / Decimal("100"))


def _upgrade_item_v1(item: ItemV1, default_tax_rate: Decimal) -> Item:
    splits = item.splits
    if not splits and item.assigned_to:
        splits = _owner_split(item.assigned_to)
    return Item(
        id=item.id,
        name=item.name,
        amount=item.amount,
        splits=splits,
        tax_rate=default_tax_rate if item.tax_rate is None else item.tax_rate,
    )


def _v1_tip(snapshot: SnapshotV1) -> tuple[TipMode, Decimal]:
    # A v1 writer that already knew equal/proportional stored the fraction as is.
    if snapshot.tip_mode in (TipMode.EQUAL.value, TipMode.PROPORTIONAL.value):
        tip_percentage = snapshot.tip_percentage or Decimal("0")
        return TipMode(snapshot.tip_mode), max(Decimal("0"), tip_percentage)
    return TipMode.PROPORTIONAL, _legacy_tip_percentage(snapshot.tip_mode, snapshot.tip_amount)


def _v1_tax(snapshot: SnapshotV1, settings: SplitterSettings) -> tuple[Decimal, str]:
    if snapshot.selected_province_id:
        if snapshot.tax_rate is not None:
            return snapshot.tax_rate, snapshot.selected_province_id
        preset = get_tax_preset(snapshot.selected_province_id)
        if preset is not None:
            return preset.rate, preset.id
    if snapshot.tax_rate is None or snapshot.tax_rate == settings.default_tax_rate:
        return settings.default_tax_rate, settings.default_province_id
    return snapshot.tax_rate, CUSTOM_TAX_PRESET_ID


def upgrade_v1_to_v2(
    snapshot: SnapshotV1,
    settings: Optional[SplitterSettings] = None,
) -> StoredBillState:
    """
    Move to the current tip model and add the province selection.

    - an equal/proportional tip mode and its tipPercentage carry over as is
    - otherwise the tip is proportional: "percentage" tips keep their
      rate, "none" and "fixed" become 0
    - a stored selectedProvinceId is kept
    - without one, a missing tax rate takes the default preset and a
      stored rate that is not the default preset's rate is marked custom
    """
    settings = settings or get_settings()
    tax_rate, province_id = _v1_tax(snapshot, settings)
    tip_mode, tip_percentage = _v1_tip(snapshot)

    return StoredBillState(
        version=2,
        people=snapshot.people,
        items=tuple(_upgrade_item_v1(item, tax_rate) for item in snapshot.items),
        tax_rate=tax_rate,
        selected_province_id=province_id,
        tip_mode=tip_mode,
        tip_percentage=tip_percentage,
    )


# Schema used to read each version, and the step that leaves it.
_SCHEMAS: dict[int, type[BaseModel]] = {
    0: SnapshotV0,
    1: SnapshotV1,
    CURRENT_STORAGE_VERSION: StoredBillState,
}

_UPGRADES: dict[int, tuple[str, Callable[..., BaseModel]]] = {
    0: ("v0_to_v1", lambda snapshot, settings: upgrade_v0_to_v1(snapshot)),
    1: ("v1_to_v2", upgrade_v1_to_v2),
}


# =============================================================================
# ENTRY POINTS
# =============================================================================

def _fallback(
    warning: str,
    settings: Optional[SplitterSettings],
    source_version: Optional[int] = None,
) -> MigrationResult:
    return MigrationResult(
        state=get_initial_bill_state(settings),
        source_version=source_version,
        warnings=(warning,),
        fell_back=True,
    )


def _read_version(raw: Mapping[str, Any]) -> Optional[int]:
    """The snapshot's version tag; an absent or null tag means v0."""
    version = raw.get("version")
    if version is None:
        return 0
    if isinstance(version, bool) or not isinstance(version, int):
        return None
    return version


def migrate_snapshot(
    raw: Any,
    settings: Optional[SplitterSettings] = None,
) -> MigrationResult:
    """
    Upgrade a raw stored snapshot to the current BillState.

    Returns a MigrationResult describing what happened. Never raises.
    """
    if not isinstance(raw, Mapping):
        return _fallback(
            f"Stored snapshot is not a record ({type(raw).__name__}). Using initial state.",
            settings,
        )

    version = _read_version(raw)
    if version not in _SCHEMAS:
        return _fallback(
            f"Unknown storage version: {raw.get('version')!r}. Using initial state.",
            settings,
        )

    try:
        snapshot = _SCHEMAS[version].model_validate(raw)
    except ValidationError as e:
        return _fallback(
            f"Stored snapshot (version {version}) is corrupt: "
            f"{e.error_count()} validation errors. Using initial state.",
            settings,
            source_version=version,
        )

    steps = []
    current = version
    while current != CURRENT_STORAGE_VERSION:
        name, step = _UPGRADES[current]
        snapshot = step(snapshot, settings)
        steps.append(name)
        current += 1

    return MigrationResult(
        state=snapshot.to_bill_state(),
        source_version=version,
        steps=tuple(steps),
    )


def migrate(raw: Any, settings: Optional[SplitterSettings] = None) -> BillState:
    """Upgrade a raw stored snapshot and return only the resulting state."""
    return migrate_snapshot(raw, settings).state
