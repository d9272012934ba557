"""Shared fixtures for Bill Splitter tests."""

from decimal import Decimal

import pytest

from bill_splitter.config import get_settings
from bill_splitter.models.bill import BillState, Item, ItemSplit, Person, TipMode


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test against default settings, away from any real .env."""
    for key in (
        "BILL_SPLITTER_DEFAULT_PROVINCE_ID",
        "BILL_SPLITTER_DEFAULT_TIP_PERCENTAGE",
        "BILL_SPLITTER_STORAGE_KEY",
        "BILL_SPLITTER_SNAPSHOT_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def alice():
    return Person(id="alice", name="Alice")


@pytest.fixture
def bob():
    return Person(id="bob", name="Bob")


@pytest.fixture
def carol():
    return Person(id="carol", name="Carol")


@pytest.fixture
def empty_state():
    return BillState(
        tax_rate=Decimal("0.13"),
        selected_province_id="ON",
        tip_mode=TipMode.PROPORTIONAL,
        tip_percentage=Decimal("0"),
    )


@pytest.fixture
def dinner_state(empty_state, alice, bob, carol):
    """Three diners; Alice and Bob share pasta, Alice has wine, Carol has nothing."""
    return empty_state.model_copy(update={
        "people": (alice, bob, carol),
        "items": (
            Item(
                id="pasta",
                name="Pasta",
                amount=Decimal("40"),
                tax_rate=Decimal("0.13"),
                splits=(
                    ItemSplit(person_id="alice", percentage=Decimal("50")),
                    ItemSplit(person_id="bob", percentage=Decimal("50")),
                ),
            ),
            Item(
                id="wine",
                name="Wine",
                amount=Decimal("30"),
                tax_rate=Decimal("0.13"),
                splits=(ItemSplit(person_id="alice", percentage=Decimal("100")),),
            ),
        ),
    })
