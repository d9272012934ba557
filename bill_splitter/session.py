"""
Bill Session

This module ties the pure core to the outside world:
1. Load (stored slot -> migrate -> current BillState)
2. Edit (engine operation -> swap state -> persist -> audit)
3. Summarize (current BillState -> BillSummary)

DESIGN DECISION: The session is the single writer of the "current
state" reference. Each edit runs the pure engine operation against the
state held at that moment and swaps in the result, all under one lock,
so readers only ever see a complete BillState.

Storage failures never lose the in-memory bill; they are audited and
the next successful write catches the slot up.
"""

import asyncio
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Optional, Union

from bill_splitter.audit import AuditLogger, create_correlation_id
from bill_splitter.config import SplitterSettings, get_settings
from bill_splitter.engine import state as engine
from bill_splitter.migration import (
    CURRENT_STORAGE_VERSION,
    MigrationResult,
    get_initial_bill_state,
    migrate_snapshot,
    prepare_for_storage,
)
from bill_splitter.models.bill import (
    BillState,
    BillSummary,
    ItemSplit,
    ItemUpdate,
    PersonUpdate,
    TipMode,
)
from bill_splitter.models.operations import OperationResult
from bill_splitter.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotStorageInterface,
    StorageError,
)
from bill_splitter.summary import calculate_summary


class BillSession:
    """
    Owns the live bill.

    Flow:
    1. load() once at start-up
    2. Call the edit methods; each returns the engine's OperationResult
    3. summary() whenever figures are needed

    Every applied edit is written to storage straight away.
    Rejected edits change nothing and write nothing.
    """

    def __init__(
        self,
        storage: Optional[SnapshotStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[SplitterSettings] = None,
        initial_state: Optional[BillState] = None,
    ):
        self._settings = settings or get_settings()
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger(correlation_id=create_correlation_id())
        self._state = initial_state or get_initial_bill_state(self._settings)
        self._lock = asyncio.Lock()

    @property
    def state(self) -> BillState:
        return self._state

    @property
    def storage(self) -> Optional[SnapshotStorageInterface]:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    # -------------------------------------------------------------------------
    # Loading & persistence
    # -------------------------------------------------------------------------

    async def load(self) -> MigrationResult:
        """
        Read the stored slot and make it the live bill.

        A snapshot that had to be upgraded is written back in the current
        shape. A snapshot that could not be used is left in the slot
        untouched until the next edit overwrites it.
        """
        async with self._lock:
            raw = None
            if self._storage is not None:
                try:
                    raw = await self._storage.read_snapshot()
                except StorageError as e:
                    await self._audit_logger.log_error(
                        error_type="snapshot_read_failed",
                        error_message=str(e),
                    )
                    result = MigrationResult(
                        state=get_initial_bill_state(self._settings),
                        warnings=(f"Could not read stored snapshot: {e}",),
                        fell_back=True,
                    )
                    await self._audit_logger.log_migration_fallback(list(result.warnings))
                    self._state = result.state
                    return result

            if raw is None:
                await self._audit_logger.log_snapshot_loaded(version=None, found=False)
                result = MigrationResult(state=get_initial_bill_state(self._settings))
                self._state = result.state
                return result

            result = migrate_snapshot(raw, self._settings)
            self._state = result.state

            if result.fell_back:
                await self._audit_logger.log_migration_fallback(list(result.warnings))
                return result

            await self._audit_logger.log_snapshot_loaded(version=result.source_version, found=True)
            if result.migrated:
                await self._audit_logger.log_snapshot_migrated(
                    source_version=result.source_version,
                    target_version=result.target_version,
                    steps=list(result.steps),
                )
                await self._persist()
            return result

    async def _persist(self) -> bool:
        if self._storage is None:
            return True
        stored = prepare_for_storage(self._state)
        try:
            await self._storage.write_snapshot(stored.to_snapshot())
        except StorageError as e:
            await self._audit_logger.log_save_failed(
                storage_key=self._storage.storage_key,
                error_message=str(e),
            )
            return False
        await self._audit_logger.log_snapshot_saved(
            version=CURRENT_STORAGE_VERSION,
            storage_key=self._storage.storage_key,
        )
        return True

    async def save(self) -> bool:
        """Write the current bill to storage now."""
        async with self._lock:
            return await self._persist()

    async def reset(self) -> BillState:
        """Throw the bill away and start fresh with the configured defaults."""
        async with self._lock:
            self._state = get_initial_bill_state(self._settings)
            await self._audit_logger.log_state_reset()
            await self._persist()
            return self._state

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    async def apply(
        self,
        operation: Callable[..., OperationResult],
        *args,
        **kwargs,
    ) -> OperationResult:
        """
        Run an engine operation against the live bill.

        The state swap, the write and the audit entry happen under the
        session lock, so concurrent edits are applied one at a time.
        """
        async with self._lock:
            result = operation(self._state, *args, **kwargs)
            await self._audit_logger.log_operation(result)
            if result.applied:
                self._state = result.state
                await self._persist()
            return result

    async def add_person(self, name: str) -> OperationResult:
        return await self.apply(engine.add_person, name)

    async def remove_person(self, person_id: str) -> OperationResult:
        return await self.apply(engine.remove_person, person_id)

    async def update_person(self, person_id: str, updates: PersonUpdate) -> OperationResult:
        return await self.apply(engine.update_person, person_id, updates)

    async def add_item(
        self,
        name: str,
        amount: Decimal,
        splits: Sequence[ItemSplit],
        tax_rate: Optional[Decimal] = None,
    ) -> OperationResult:
        return await self.apply(engine.add_item, name, amount, splits, tax_rate)

    async def remove_item(self, item_id: str) -> OperationResult:
        return await self.apply(engine.remove_item, item_id)

    async def update_item(self, item_id: str, updates: ItemUpdate) -> OperationResult:
        return await self.apply(engine.update_item, item_id, updates)

    async def reassign_item(self, item_id: str, splits: Sequence[ItemSplit]) -> OperationResult:
        return await self.apply(engine.reassign_item, item_id, splits)

    async def set_tax_rate(self, tax_rate: Decimal) -> OperationResult:
        return await self.apply(engine.set_tax_rate, tax_rate)

    async def set_selected_province_id(self, province_id: str) -> OperationResult:
        return await self.apply(engine.set_selected_province_id, province_id)

    async def select_tax_preset(self, province_id: str) -> OperationResult:
        return await self.apply(engine.select_tax_preset, province_id)

    async def set_tip_mode(self, tip_mode: Union[TipMode, str]) -> OperationResult:
        return await self.apply(engine.set_tip_mode, tip_mode)

    async def set_tip_percentage(self, tip_percentage: Decimal) -> OperationResult:
        return await self.apply(engine.set_tip_percentage, tip_percentage)

    async def remove_person_and_reassign_items(
        self,
        person_id: str,
        target_person_id: str,
    ) -> OperationResult:
        return await self.apply(
            engine.remove_person_and_reassign_items,
            person_id,
            target_person_id,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def summary(self) -> BillSummary:
        """Breakdown of the live bill."""
        return calculate_summary(self._state)


def create_session(
    use_storage: bool = True,
    settings: Optional[SplitterSettings] = None,
) -> BillSession:
    """
    Factory function to create a session wired to configured storage.

    Args:
        use_storage: Back the session with the JSON snapshot file.
                    Set to False for an in-memory slot.
    """
    settings = settings or get_settings()
    if use_storage:
        storage = JsonFileSnapshotStorage(
            path=settings.snapshot_path,
            storage_key=settings.storage_key,
        )
    else:
        storage = InMemorySnapshotStorage(storage_key=settings.storage_key)

    return BillSession(
        storage=storage,
        audit_logger=AuditLogger(correlation_id=create_correlation_id()),
        settings=settings,
    )
