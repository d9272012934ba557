"""State engine package."""

from bill_splitter.engine.state import (
    add_item,
    add_person,
    reassign_item,
    remove_item,
    remove_person,
    remove_person_and_reassign_items,
    select_tax_preset,
    set_selected_province_id,
    set_tax_rate,
    set_tip_mode,
    set_tip_percentage,
    update_item,
    update_person,
)
from bill_splitter.engine.validation import (
    SPLIT_TOTAL_TOLERANCE,
    check_splits,
    generate_id,
    is_full_share,
    to_decimal,
)

__all__ = [
    "SPLIT_TOTAL_TOLERANCE",
    "add_item",
    "add_person",
    "check_splits",
    "generate_id",
    "is_full_share",
    "reassign_item",
    "remove_item",
    "remove_person",
    "remove_person_and_reassign_items",
    "select_tax_preset",
    "set_selected_province_id",
    "set_tax_rate",
    "set_tip_mode",
    "set_tip_percentage",
    "to_decimal",
    "update_item",
    "update_person",
]
