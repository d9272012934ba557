"""
Bill Splitter - Core Package

Splits a shared restaurant bill between the people at the table.

DESIGN PRINCIPLES:
1. State transitions are pure: old state in, new state out
2. Rejections are values, not exceptions
3. Money is Decimal and is rounded exactly once, at output time
4. Stored snapshots are versioned and always upgradeable
"""

__version__ = "1.0.0"
__author__ = "Bill Splitter Team"
