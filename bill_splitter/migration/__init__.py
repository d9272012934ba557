"""Snapshot migration package."""

from bill_splitter.migration.migrate import (
    MigrationResult,
    get_initial_bill_state,
    migrate,
    migrate_snapshot,
    prepare_for_storage,
    upgrade_v0_to_v1,
    upgrade_v1_to_v2,
)
from bill_splitter.migration.snapshots import (
    CURRENT_STORAGE_VERSION,
    SnapshotV0,
    SnapshotV1,
)

__all__ = [
    "CURRENT_STORAGE_VERSION",
    "MigrationResult",
    "SnapshotV0",
    "SnapshotV1",
    "get_initial_bill_state",
    "migrate",
    "migrate_snapshot",
    "prepare_for_storage",
    "upgrade_v0_to_v1",
    "upgrade_v1_to_v2",
]
