"""
Tests for the Bill State Engine

Every operation is checked for:
1. The new state it produces
2. Leaving the input state untouched
3. Handing back the same instance with a Rejection when it refuses
"""

import pytest
from decimal import Decimal

from bill_splitter.engine import (
    add_item,
    add_person,
    check_splits,
    generate_id,
    is_full_share,
    reassign_item,
    remove_item,
    remove_person,
    remove_person_and_reassign_items,
    select_tax_preset,
    set_selected_province_id,
    set_tax_rate,
    set_tip_mode,
    set_tip_percentage,
    to_decimal,
    update_item,
    update_person,
)
from bill_splitter.models.bill import ItemSplit, ItemUpdate, PersonUpdate, TipMode
from bill_splitter.models.operations import RejectionCode


def split(person_id, percentage):
    return ItemSplit(person_id=person_id, percentage=Decimal(str(percentage)))


class TestValidationHelpers:
    """Tests for the shared split checks."""

    def test_generate_id_is_unique(self):
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_to_decimal_keeps_float_text(self):
        assert to_decimal(0.13) == Decimal("0.13")
        assert to_decimal(40) == Decimal("40")

    def test_full_share_tolerance(self):
        assert is_full_share(Decimal("100"))
        assert is_full_share(Decimal("99.995"))
        assert is_full_share(Decimal("100.01"))
        assert not is_full_share(Decimal("99.98"))

    def test_check_splits_accepts_thirds(self, dinner_state):
        splits = [split("alice", "33.33"), split("bob", "33.33"), split("carol", "33.34")]
        assert check_splits(dinner_state.people, splits) is None

    def test_check_splits_unknown_person(self, dinner_state):
        rejection = check_splits(dinner_state.people, [split("zed", 100)])
        assert rejection.code == RejectionCode.UNKNOWN_PERSON
        assert rejection.details["unknown_person_ids"] == ["zed"]

    def test_check_splits_duplicate_person(self, dinner_state):
        rejection = check_splits(dinner_state.people, [split("alice", 50), split("alice", 50)])
        assert rejection.code == RejectionCode.DUPLICATE_SPLIT

    def test_check_splits_bad_total(self, dinner_state):
        rejection = check_splits(dinner_state.people, [split("alice", 50), split("bob", 40)])
        assert rejection.code == RejectionCode.INVALID_SPLIT_TOTAL

    def test_check_splits_empty(self, dinner_state):
        rejection = check_splits(dinner_state.people, [])
        assert rejection.code == RejectionCode.INVALID_SPLIT_TOTAL


class TestPersonOperations:
    """Tests for adding, removing and renaming people."""

    def test_add_person_appends(self, empty_state):
        first = add_person(empty_state, "Alice")
        second = add_person(first.state, "Bob")
        assert second.applied
        assert [p.name for p in second.state.people] == ["Alice", "Bob"]
        assert second.state.people[0].id != second.state.people[1].id
        assert empty_state.people == ()

    def test_remove_unreferenced_person(self, dinner_state):
        result = remove_person(dinner_state, "carol")
        assert result.applied
        assert [p.id for p in result.state.people] == ["alice", "bob"]

    def test_remove_person_with_items_is_rejected(self, dinner_state):
        result = remove_person(dinner_state, "bob")
        assert result.rejected
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.PERSON_HAS_ITEMS
        assert result.rejection.details["item_ids"] == ["pasta"]

    def test_remove_unknown_person_is_rejected(self, dinner_state):
        result = remove_person(dinner_state, "zed")
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.PERSON_NOT_FOUND

    def test_update_person_merges_fields(self, dinner_state):
        result = update_person(dinner_state, "bob", PersonUpdate(name="Robert"))
        assert result.applied
        assert result.state.find_person("bob").name == "Robert"
        assert dinner_state.find_person("bob").name == "Bob"

    def test_update_person_with_no_fields_keeps_person(self, dinner_state):
        result = update_person(dinner_state, "bob", PersonUpdate())
        assert result.applied
        assert result.state.find_person("bob").name == "Bob"

    def test_update_person_accepts_any_name_add_person_accepts(self, empty_state):
        long_name = "Bartholomew " * 30
        added = add_person(empty_state, long_name)
        person_id = added.state.people[0].id
        result = update_person(added.state, person_id, PersonUpdate(name=long_name + "Jr"))
        assert result.applied
        assert result.state.people[0].name == (long_name + "Jr").strip()

    def test_update_unknown_person_is_noop(self, dinner_state):
        result = update_person(dinner_state, "zed", PersonUpdate(name="Zed"))
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.PERSON_NOT_FOUND


class TestItemOperations:
    """Tests for adding, removing, editing and reassigning items."""

    def test_add_item_uses_global_tax_rate(self, dinner_state):
        result = add_item(dinner_state, "Salad", Decimal("12"), [split("carol", 100)])
        assert result.applied
        item = result.state.items[-1]
        assert item.name == "Salad"
        assert item.tax_rate == Decimal("0.13")
        assert len(result.state.items) == 3

    def test_add_item_with_tax_override(self, dinner_state):
        result = add_item(
            dinner_state, "Groceries", Decimal("20"), [split("carol", 100)],
            tax_rate=Decimal("0"),
        )
        assert result.state.items[-1].tax_rate == Decimal("0")

    def test_item_tax_rate_frozen_after_global_change(self, dinner_state):
        added = add_item(dinner_state, "Salad", Decimal("12"), [split("carol", 100)])
        changed = set_tax_rate(added.state, Decimal("0.05"))
        assert changed.state.tax_rate == Decimal("0.05")
        assert changed.state.items[-1].tax_rate == Decimal("0.13")

    def test_add_item_unknown_person_rejected(self, dinner_state):
        result = add_item(dinner_state, "Salad", Decimal("12"), [split("zed", 100)])
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.UNKNOWN_PERSON

    def test_add_item_bad_total_rejected(self, dinner_state):
        result = add_item(
            dinner_state, "Salad", Decimal("12"), [split("alice", 50), split("bob", 49)],
        )
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.INVALID_SPLIT_TOTAL

    def test_add_item_within_tolerance(self, dinner_state):
        result = add_item(
            dinner_state, "Nachos", Decimal("9"),
            [split("alice", "33.33"), split("bob", "33.33"), split("carol", "33.33")],
        )
        assert result.applied

    def test_add_item_negative_amount_rejected(self, dinner_state):
        result = add_item(dinner_state, "Refund", Decimal("-5"), [split("alice", 100)])
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.INVALID_AMOUNT

    def test_add_item_accepts_float_amount(self, dinner_state):
        result = add_item(dinner_state, "Tea", 2.35, [split("alice", 100)])
        assert result.state.items[-1].amount == Decimal("2.35")

    def test_remove_item(self, dinner_state):
        result = remove_item(dinner_state, "wine")
        assert [item.id for item in result.state.items] == ["pasta"]

    def test_remove_unknown_item_is_noop(self, dinner_state):
        result = remove_item(dinner_state, "cake")
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.ITEM_NOT_FOUND

    def test_update_item_merges_fields(self, dinner_state):
        result = update_item(dinner_state, "wine", ItemUpdate(name="Red Wine", amount=Decimal("35")))
        wine = result.state.find_item("wine")
        assert wine.name == "Red Wine"
        assert wine.amount == Decimal("35")
        assert wine.tax_rate == Decimal("0.13")
        assert wine.splits == dinner_state.find_item("wine").splits

    def test_update_item_does_not_check_split_total(self, dinner_state):
        result = update_item(dinner_state, "wine", ItemUpdate(splits=(split("alice", 40),)))
        assert result.applied
        assert result.state.find_item("wine").split_total == Decimal("40")

    def test_update_unknown_item_is_noop(self, dinner_state):
        result = update_item(dinner_state, "cake", ItemUpdate(name="Cake"))
        assert result.state is dinner_state

    def test_reassign_item_replaces_splits(self, dinner_state):
        result = reassign_item(dinner_state, "wine", [split("bob", 25), split("carol", 75)])
        assert result.applied
        assert result.state.find_item("wine").splits == (split("bob", 25), split("carol", 75))

    def test_reassign_item_validates(self, dinner_state):
        result = reassign_item(dinner_state, "wine", [split("bob", 25)])
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.INVALID_SPLIT_TOTAL

    def test_reassign_unknown_item(self, dinner_state):
        result = reassign_item(dinner_state, "cake", [split("bob", 100)])
        assert result.rejection.code == RejectionCode.ITEM_NOT_FOUND


class TestTaxAndTip:
    """Tests for tax and tip settings."""

    def test_set_tax_rate_clamps_negative(self, dinner_state):
        assert set_tax_rate(dinner_state, Decimal("-0.1")).state.tax_rate == Decimal("0")

    def test_set_selected_province_stores_verbatim(self, dinner_state):
        result = set_selected_province_id(dinner_state, "custom")
        assert result.state.selected_province_id == "custom"
        assert result.state.tax_rate == dinner_state.tax_rate

    def test_select_tax_preset_adopts_rate(self, dinner_state):
        result = select_tax_preset(dinner_state, "QC")
        assert result.state.selected_province_id == "QC"
        assert result.state.tax_rate == Decimal("0.14975")
        assert result.state.find_item("pasta").tax_rate == Decimal("0.13")

    def test_select_custom_keeps_rate(self, dinner_state):
        result = select_tax_preset(dinner_state, "custom")
        assert result.state.selected_province_id == "custom"
        assert result.state.tax_rate == Decimal("0.13")

    def test_set_tip_mode(self, dinner_state):
        assert set_tip_mode(dinner_state, TipMode.EQUAL).state.tip_mode == TipMode.EQUAL
        assert set_tip_mode(dinner_state, "equal").state.tip_mode == TipMode.EQUAL

    def test_set_tip_mode_rejects_unknown(self, dinner_state):
        result = set_tip_mode(dinner_state, "percentage")
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.INVALID_TIP_MODE

    def test_set_tip_percentage_clamps_negative(self, dinner_state):
        assert set_tip_percentage(dinner_state, Decimal("-1")).state.tip_percentage == Decimal("0")
        assert set_tip_percentage(dinner_state, 0.2).state.tip_percentage == Decimal("0.2")


class TestRemovePersonAndReassign:
    """Tests for removing a person and moving their shares."""

    def test_moves_share_onto_existing_split(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "bob", "alice")
        assert result.applied
        assert [p.id for p in result.state.people] == ["alice", "carol"]
        pasta = result.state.find_item("pasta")
        assert pasta.splits == (split("alice", 100),)

    def test_creates_split_for_new_target(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "alice", "carol")
        pasta = result.state.find_item("pasta")
        wine = result.state.find_item("wine")
        assert pasta.splits == (split("bob", 50), split("carol", 50))
        assert wine.splits == (split("carol", 100),)

    def test_every_item_still_sums_to_hundred(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "alice", "bob")
        for item in result.state.items:
            assert is_full_share(item.split_total)
            assert item.split_for("alice") is None

    def test_unaffected_items_untouched(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "bob", "carol")
        assert result.state.find_item("wine") is dinner_state.find_item("wine")

    def test_unknown_target_rejected(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "bob", "zed")
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.TARGET_NOT_FOUND

    def test_self_target_rejected(self, dinner_state):
        result = remove_person_and_reassign_items(dinner_state, "bob", "bob")
        assert result.state is dinner_state
        assert result.rejection.code == RejectionCode.INVALID_REASSIGN_TARGET


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
