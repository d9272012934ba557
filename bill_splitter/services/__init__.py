"""
Services Package

External collaborators of the bill core. Currently only snapshot storage.
"""

from bill_splitter.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotCorruptError,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "SnapshotCorruptError",
    "SnapshotStorageInterface",
    "StorageError",
]
