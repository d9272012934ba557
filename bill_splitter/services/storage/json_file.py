"""
JSON File Snapshot Storage

The slot is one key in a small JSON object on disk, the same way a
browser keeps it under a localStorage key:

    {"billsplitter_state": {"version": 2, "people": [...], ...}}

Writes go to a temporary file that is then renamed over the original,
so a crash mid-write never leaves a half-written snapshot behind.
Other keys in the file are left untouched.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from bill_splitter.config import get_settings
from bill_splitter.services.storage.interface import (
    SnapshotCorruptError,
    SnapshotStorageInterface,
    StorageError,
)


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """Snapshot slot backed by a JSON file."""

    def __init__(
        self,
        path: Optional[os.PathLike] = None,
        storage_key: Optional[str] = None,
    ):
        settings = get_settings()
        self._path = Path(path or settings.snapshot_path)
        self._key = storage_key or settings.storage_key

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def path(self) -> Path:
        return self._path

    def _load_file(self) -> dict:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise SnapshotCorruptError(f"{self._path} is not valid UTF-8: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SnapshotCorruptError(f"{self._path} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise SnapshotCorruptError(f"{self._path} does not hold a JSON object")
        return data

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, max=0.5),
        reraise=True,
    )
    def _dump_file(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)

    async def read_snapshot(self) -> Optional[Any]:
        return self._load_file().get(self._key)

    async def write_snapshot(self, snapshot: dict) -> bool:
        try:
            data = self._load_file()
        except SnapshotCorruptError:
            # The write replaces whatever garbage was there.
            data = {}
        data[self._key] = snapshot
        try:
            self._dump_file(data)
        except (OSError, TypeError) as e:
            raise StorageError(f"Failed to write snapshot: {e}")
        return True

    async def clear(self) -> bool:
        data = self._load_file()
        if self._key not in data:
            return False
        del data[self._key]
        try:
            self._dump_file(data)
        except OSError as e:
            raise StorageError(f"Failed to clear snapshot: {e}")
        return True
