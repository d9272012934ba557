"""
Abstract Snapshot Storage Interface

DESIGN DECISION: The bill lives in exactly one opaque key-value slot.
The core never touches storage; the session reads the slot once at
start-up and writes it after each applied edit through this interface.
This allows us to:
1. Use in-memory storage for testing
2. Back the slot with a JSON file locally
3. Swap in any other single-slot store without touching the engine

The interface is intentionally tiny - read, write, clear.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for the single bill snapshot slot.

    Snapshots cross this boundary as plain JSON-ready dicts; the
    migration layer, not the store, decides what they mean.
    """

    @property
    @abstractmethod
    def storage_key(self) -> str:
        """Key of the slot this store reads and writes."""
        pass

    @abstractmethod
    async def read_snapshot(self) -> Optional[Any]:
        """
        Read whatever is stored in the slot.

        Returns:
            The stored value, or None if the slot is empty

        Raises:
            SnapshotCorruptError: If the slot holds undecodable data
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def write_snapshot(self, snapshot: dict) -> bool:
        """
        Replace the slot's contents.

        Args:
            snapshot: A versioned snapshot dict

        Returns:
            True if written successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Empty the slot. Returns True if something was removed."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SnapshotCorruptError(StorageError):
    """The slot holds data that cannot be decoded."""
    pass
