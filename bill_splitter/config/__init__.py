"""Configuration package."""

from bill_splitter.config.settings import (
    SplitterSettings,
    get_settings,
)
from bill_splitter.config.tax_presets import (
    CUSTOM_TAX_PRESET_ID,
    DEFAULT_TAX_PRESET_ID,
    TAX_PRESETS,
    TaxPreset,
    get_tax_preset,
)

__all__ = [
    "CUSTOM_TAX_PRESET_ID",
    "DEFAULT_TAX_PRESET_ID",
    "SplitterSettings",
    "TAX_PRESETS",
    "TaxPreset",
    "get_settings",
    "get_tax_preset",
]
