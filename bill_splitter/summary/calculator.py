"""
Bill Summary Calculator

DESIGN DECISION: The summary is a pure function of the BillState.
Everything is accumulated at full Decimal precision and rounded to
cents exactly once, when the per-person figures are produced.

Rounding rules:
1. Each person's subtotal, tax and tip are rounded independently
2. A person's total is the sum of those rounded parts, rounded again
3. Bill totals are sums of the rounded per-person figures

The calculator trusts its input: the State Engine keeps the bill valid.
A split for someone no longer on the bill is simply skipped.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from bill_splitter.models.bill import (
    BillState,
    BillSummary,
    BillTotals,
    PersonBillShare,
    TipMode,
)


CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def round_currency(value: Decimal) -> Decimal:
    """Round to the cent, halves away from zero."""
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


class _Accumulator:
    """Running full-precision figures for one person."""

    __slots__ = ("person_id", "name", "subtotal", "tax", "tip")

    def __init__(self, person_id: str, name: str):
        self.person_id = person_id
        self.name = name
        self.subtotal = ZERO
        self.tax = ZERO
        self.tip = ZERO

    def to_share(self) -> PersonBillShare:
        subtotal = round_currency(self.subtotal)
        tax = round_currency(self.tax)
        tip = round_currency(self.tip)
        return PersonBillShare(
            person_id=self.person_id,
            name=self.name,
            subtotal=subtotal,
            tax=tax,
            tip=tip,
            total=round_currency(subtotal + tax + tip),
        )


def _distribute_tip(
    accumulators: list[_Accumulator],
    total_subtotal: Decimal,
    total_tip: Decimal,
    tip_mode: TipMode,
) -> None:
    if tip_mode == TipMode.EQUAL:
        # Only people who ordered something tip; if nobody did, everyone does.
        contributors = [acc for acc in accumulators if acc.subtotal > 0]
        recipients = contributors or accumulators
        share = total_tip / len(recipients)
        for acc in recipients:
            acc.tip = share
        return

    if total_subtotal == 0:
        return
    for acc in accumulators:
        acc.tip = acc.subtotal / total_subtotal * total_tip


def calculate_summary(state: BillState) -> BillSummary:
    """
    Work out what everyone owes.

    Steps:
    1. Spread each item over its splits, taxing each share at the
       item's own frozen rate (never the current global rate)
    2. Tip = total subtotal * tip_percentage, shared per tip_mode
    3. Round per person, then total the rounded figures
    """
    accumulators = [_Accumulator(person.id, person.name) for person in state.people]
    by_id = {acc.person_id: acc for acc in accumulators}

    for item in state.items:
        for split in item.splits:
            acc = by_id.get(split.person_id)
            if acc is None:
                continue
            share_amount = item.amount * split.percentage / HUNDRED
            acc.subtotal += share_amount
            acc.tax += share_amount * item.tax_rate

    total_subtotal = sum((acc.subtotal for acc in accumulators), ZERO)
    total_tip = total_subtotal * state.tip_percentage

    if total_tip > 0 and accumulators:
        _distribute_tip(accumulators, total_subtotal, total_tip, state.tip_mode)

    per_person = tuple(acc.to_share() for acc in accumulators)

    subtotal = round_currency(sum((share.subtotal for share in per_person), ZERO))
    tax = round_currency(sum((share.tax for share in per_person), ZERO))
    tip = round_currency(sum((share.tip for share in per_person), ZERO))

    return BillSummary(
        per_person=per_person,
        totals=BillTotals(
            subtotal=subtotal,
            tax=tax,
            tip=tip,
            grand_total=round_currency(subtotal + tax + tip),
        ),
    )
