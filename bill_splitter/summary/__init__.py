"""Bill summary package."""

from bill_splitter.summary.calculator import calculate_summary, round_currency

__all__ = ["calculate_summary", "round_currency"]
