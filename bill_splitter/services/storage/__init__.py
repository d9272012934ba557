"""
Storage Services Package

Provides the abstract snapshot slot interface and its implementations.
"""

from bill_splitter.services.storage.interface import (
    SnapshotCorruptError,
    SnapshotStorageInterface,
    StorageError,
)
from bill_splitter.services.storage.json_file import JsonFileSnapshotStorage
from bill_splitter.services.storage.memory import InMemorySnapshotStorage

__all__ = [
    # Interfaces
    "SnapshotStorageInterface",
    # Exceptions
    "SnapshotCorruptError",
    "StorageError",
    # Implementations
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
]
