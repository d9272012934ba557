"""
Bill State Engine

Pure functions: (BillState, request) -> OperationResult
No side effects. No IO. No logging. Deterministic apart from fresh ids.

The input state is never modified. On success the result carries a new
BillState; on rejection it carries the *same* instance that was passed
in, together with a Rejection explaining why nothing happened.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional, Union

from bill_splitter.config.tax_presets import TAX_PRESETS, TaxPreset, get_tax_preset
from bill_splitter.engine.validation import check_splits, generate_id, to_decimal
from bill_splitter.models.bill import (
    BillState,
    Item,
    ItemSplit,
    ItemUpdate,
    Person,
    PersonUpdate,
    TipMode,
)
from bill_splitter.models.operations import (
    OperationResult,
    Rejection,
    RejectionCode,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ok(operation: str, state: BillState) -> OperationResult:
    return OperationResult(operation=operation, state=state, applied=True)


def _reject(
    operation: str,
    state: BillState,
    code: RejectionCode,
    message: str,
    **details,
) -> OperationResult:
    return OperationResult(
        operation=operation,
        state=state,
        applied=False,
        rejection=Rejection(code=code, message=message, details=details),
    )


def _rejected_with(operation: str, state: BillState, rejection: Rejection) -> OperationResult:
    return OperationResult(
        operation=operation,
        state=state,
        applied=False,
        rejection=rejection,
    )


def _replace_item(state: BillState, item: Item) -> BillState:
    return state.model_copy(update={
        "items": tuple(item if existing.id == item.id else existing for existing in state.items),
    })


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


def add_person(state: BillState, name: str) -> OperationResult:
    """Append a new person with a fresh id. Always applies."""
    person = Person(id=generate_id(), name=name)
    return _ok("add_person", state.model_copy(update={
        "people": (*state.people, person),
    }))


def remove_person(state: BillState, person_id: str) -> OperationResult:
    """
    Remove a person who has no item splits.

    A person with splits must go through remove_person_and_reassign_items
    so their share of each item lands somewhere.
    """
    if not state.has_person(person_id):
        return _reject(
            "remove_person", state,
            RejectionCode.PERSON_NOT_FOUND,
            f"Person {person_id} does not exist",
            person_id=person_id,
        )

    assigned = state.items_for_person(person_id)
    if assigned:
        return _reject(
            "remove_person", state,
            RejectionCode.PERSON_HAS_ITEMS,
            f"Cannot delete person {person_id}: they have items assigned to them",
            person_id=person_id,
            item_ids=[item.id for item in assigned],
        )

    return _ok("remove_person", state.model_copy(update={
        "people": tuple(person for person in state.people if person.id != person_id),
    }))


def update_person(
    state: BillState,
    person_id: str,
    updates: PersonUpdate,
) -> OperationResult:
    """Merge the fields set on updates into the matching person."""
    person = state.find_person(person_id)
    if person is None:
        return _reject(
            "update_person", state,
            RejectionCode.PERSON_NOT_FOUND,
            f"Person {person_id} does not exist",
            person_id=person_id,
        )

    changes = {field: getattr(updates, field) for field in updates.model_fields_set}
    updated = person.model_copy(update=changes)
    return _ok("update_person", state.model_copy(update={
        "people": tuple(updated if p.id == person_id else p for p in state.people),
    }))


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def add_item(
    state: BillState,
    name: str,
    amount: Decimal,
    splits: Sequence[ItemSplit],
    tax_rate: Optional[Decimal] = None,
) -> OperationResult:
    """
    Append a new item.

    The item's tax rate is tax_rate when given, otherwise the bill's
    current global rate. Either way it is frozen on the item from now on.
    """
    amount = to_decimal(amount)
    if amount < 0:
        return _reject(
            "add_item", state,
            RejectionCode.INVALID_AMOUNT,
            f"Item amount must not be negative, got {amount}",
            amount=str(amount),
        )

    rejection = check_splits(state.people, splits)
    if rejection is not None:
        return _rejected_with("add_item", state, rejection)

    item = Item(
        id=generate_id(),
        name=name,
        amount=amount,
        splits=tuple(splits),
        tax_rate=state.tax_rate if tax_rate is None else max(Decimal("0"), to_decimal(tax_rate)),
    )
    return _ok("add_item", state.model_copy(update={
        "items": (*state.items, item),
    }))


def remove_item(state: BillState, item_id: str) -> OperationResult:
    if state.find_item(item_id) is None:
        return _reject(
            "remove_item", state,
            RejectionCode.ITEM_NOT_FOUND,
            f"Item {item_id} does not exist",
            item_id=item_id,
        )
    return _ok("remove_item", state.model_copy(update={
        "items": tuple(item for item in state.items if item.id != item_id),
    }))


def update_item(
    state: BillState,
    item_id: str,
    updates: ItemUpdate,
) -> OperationResult:
    """
    Merge the fields set on updates into the matching item.

    Splits given here are NOT checked against the 100% rule;
    use reassign_item to change who owns an item.
    """
    item = state.find_item(item_id)
    if item is None:
        return _reject(
            "update_item", state,
            RejectionCode.ITEM_NOT_FOUND,
            f"Item {item_id} does not exist",
            item_id=item_id,
        )

    changes = {field: getattr(updates, field) for field in updates.model_fields_set}
    return _ok("update_item", _replace_item(state, item.model_copy(update=changes)))


def reassign_item(
    state: BillState,
    item_id: str,
    splits: Sequence[ItemSplit],
) -> OperationResult:
    """Replace an item's splits wholesale, after the same checks as add_item."""
    item = state.find_item(item_id)
    if item is None:
        return _reject(
            "reassign_item", state,
            RejectionCode.ITEM_NOT_FOUND,
            f"Item {item_id} does not exist",
            item_id=item_id,
        )

    rejection = check_splits(state.people, splits)
    if rejection is not None:
        return _rejected_with("reassign_item", state, rejection)

    return _ok("reassign_item", _replace_item(state, item.model_copy(update={
        "splits": tuple(splits),
    })))


# ---------------------------------------------------------------------------
# Tax and tip
# ---------------------------------------------------------------------------


def set_tax_rate(state: BillState, tax_rate: Decimal) -> OperationResult:
    """Set the default rate for new items. Existing items keep theirs."""
    return _ok("set_tax_rate", state.model_copy(update={
        "tax_rate": max(Decimal("0"), to_decimal(tax_rate)),
    }))


def set_selected_province_id(state: BillState, province_id: str) -> OperationResult:
    """
    Store the selected preset id verbatim.

    Does not touch the tax rate; see select_tax_preset for that.
    """
    return _ok("set_selected_province_id", state.model_copy(update={
        "selected_province_id": province_id,
    }))


def select_tax_preset(
    state: BillState,
    province_id: str,
    presets: tuple[TaxPreset, ...] = TAX_PRESETS,
) -> OperationResult:
    """
    Select a preset and adopt its rate as the global default.

    For the custom id (or any id not in presets) only the selection
    changes and the current rate is kept.
    """
    preset = get_tax_preset(province_id, presets)
    update = {"selected_province_id": province_id}
    if preset is not None:
        update["tax_rate"] = preset.rate
    return _ok("select_tax_preset", state.model_copy(update=update))


def set_tip_mode(state: BillState, tip_mode: Union[TipMode, str]) -> OperationResult:
    try:
        mode = TipMode(tip_mode)
    except ValueError:
        return _reject(
            "set_tip_mode", state,
            RejectionCode.INVALID_TIP_MODE,
            f"Unknown tip mode: {tip_mode}",
            tip_mode=str(tip_mode),
        )
    return _ok("set_tip_mode", state.model_copy(update={"tip_mode": mode}))


def set_tip_percentage(state: BillState, tip_percentage: Decimal) -> OperationResult:
    return _ok("set_tip_percentage", state.model_copy(update={
        "tip_percentage": max(Decimal("0"), to_decimal(tip_percentage)),
    }))


# ---------------------------------------------------------------------------
# Batch operations
# ---------------------------------------------------------------------------


def _transfer_split(item: Item, person_id: str, target_id: str) -> Item:
    """Move person_id's share of item onto target_id's split."""
    moved = item.split_for(person_id)
    if moved is None:
        return item

    splits = []
    for split in item.splits:
        if split.person_id == person_id:
            continue
        if split.person_id == target_id:
            split = split.model_copy(update={"percentage": split.percentage + moved.percentage})
        splits.append(split)

    if item.split_for(target_id) is None:
        splits.append(ItemSplit(person_id=target_id, percentage=moved.percentage))

    return item.model_copy(update={"splits": tuple(splits)})


def remove_person_and_reassign_items(
    state: BillState,
    person_id: str,
    target_person_id: str,
) -> OperationResult:
    """
    Remove a person and hand each of their item shares to another person.

    The percentage moves, it is never duplicated or dropped, so every
    affected item still adds up to exactly what it did before.
    """
    if not state.has_person(target_person_id):
        return _reject(
            "remove_person_and_reassign_items", state,
            RejectionCode.TARGET_NOT_FOUND,
            f"Cannot reassign items: target person {target_person_id} does not exist",
            person_id=person_id,
            target_person_id=target_person_id,
        )

    if person_id == target_person_id:
        return _reject(
            "remove_person_and_reassign_items", state,
            RejectionCode.INVALID_REASSIGN_TARGET,
            "Cannot reassign a person's items to themselves",
            person_id=person_id,
        )

    return _ok("remove_person_and_reassign_items", state.model_copy(update={
        "people": tuple(person for person in state.people if person.id != person_id),
        "items": tuple(_transfer_split(item, person_id, target_person_id) for item in state.items),
    }))
