"""
Regional Tax Presets

Read-only table of sales tax rates by Canadian province and territory.
Rates are stored as fractions (0.13 == 13%).

The "custom" id is reserved for a user-entered rate and is never
present in the table.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaxPreset(BaseModel):
    """A named regional tax rate."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    label: str
    rate: Decimal = Field(..., ge=0)


DEFAULT_TAX_PRESET_ID = "ON"
CUSTOM_TAX_PRESET_ID = "custom"

TAX_PRESETS: tuple[TaxPreset, ...] = (
    TaxPreset(id="AB", label="Alberta (5%)", rate=Decimal("0.05")),
    TaxPreset(id="BC", label="British Columbia (12%)", rate=Decimal("0.12")),
    TaxPreset(id="MB", label="Manitoba (12%)", rate=Decimal("0.12")),
    TaxPreset(id="NB", label="New Brunswick (15%)", rate=Decimal("0.15")),
    TaxPreset(id="NL", label="Newfoundland & Labrador (15%)", rate=Decimal("0.15")),
    TaxPreset(id="NS", label="Nova Scotia (15%)", rate=Decimal("0.15")),
    TaxPreset(id="NT", label="Northwest Territories (5%)", rate=Decimal("0.05")),
    TaxPreset(id="NU", label="Nunavut (5%)", rate=Decimal("0.05")),
    TaxPreset(id="ON", label="Ontario (13%)", rate=Decimal("0.13")),
    TaxPreset(id="PE", label="Prince Edward Island (15%)", rate=Decimal("0.15")),
    TaxPreset(id="QC", label="Quebec (14.975%)", rate=Decimal("0.14975")),
    TaxPreset(id="SK", label="Saskatchewan (11%)", rate=Decimal("0.11")),
    TaxPreset(id="YT", label="Yukon (5%)", rate=Decimal("0.05")),
)


def get_tax_preset(
    preset_id: str,
    presets: tuple[TaxPreset, ...] = TAX_PRESETS,
) -> Optional[TaxPreset]:
    """Look up a preset by id. Returns None for unknown ids and for "custom"."""
    for preset in presets:
        if preset.id == preset_id:
            return preset
    return None
