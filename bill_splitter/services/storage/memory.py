"""In-memory snapshot storage, used by tests and throwaway sessions."""

import copy
from typing import Any, Optional

from bill_splitter.services.storage.interface import SnapshotStorageInterface


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Keeps the slot in a dict. Values are deep-copied in and out."""

    def __init__(self, storage_key: str = "billsplitter_state", initial: Optional[Any] = None):
        self._key = storage_key
        self._slots: dict[str, Any] = {}
        self.write_count = 0
        if initial is not None:
            self._slots[storage_key] = copy.deepcopy(initial)

    @property
    def storage_key(self) -> str:
        return self._key

    async def read_snapshot(self) -> Optional[Any]:
        return copy.deepcopy(self._slots.get(self._key))

    async def write_snapshot(self, snapshot: dict) -> bool:
        self._slots[self._key] = copy.deepcopy(snapshot)
        self.write_count += 1
        return True

    async def clear(self) -> bool:
        return self._slots.pop(self._key, None) is not None
