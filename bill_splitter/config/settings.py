"""
Configuration Management for Bill Splitter

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The core engine never reads the environment itself; it only asks
get_settings() for defaults when it has to build a fresh bill.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bill_splitter.config.tax_presets import get_tax_preset


class SplitterSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BILL_SPLITTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Defaults for a fresh bill
    default_province_id: str = Field(
        default="ON",
        description="Tax preset selected on a fresh bill"
    )
    default_tip_percentage: Decimal = Field(
        default=Decimal("0.18"),
        ge=0,
        le=1,
        description="Tip percentage on a fresh bill, as a fraction (0.18 == 18%)"
    )

    # Persistence slot
    storage_key: str = Field(
        default="billsplitter_state",
        min_length=1,
        description="Key of the single slot the bill snapshot is stored under"
    )
    snapshot_path: str = Field(
        default="billsplitter_state.json",
        description="File backing the snapshot slot for JsonFileSnapshotStorage"
    )

    @field_validator('default_province_id')
    @classmethod
    def validate_default_province(cls, v: str) -> str:
        """The default province must be a real preset so it has a rate."""
        if get_tax_preset(v) is None:
            raise ValueError(f"Unknown tax preset: {v}")
        return v

    @property
    def default_tax_rate(self) -> Decimal:
        """Rate of the default province preset."""
        return get_tax_preset(self.default_province_id).rate


@lru_cache()
def get_settings() -> SplitterSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return SplitterSettings()
