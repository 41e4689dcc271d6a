"""
Local File Storage Implementation

Each key is stored as its own file, <data_dir>/<key>.json.
This is the default backend: the dashboard keeps its state in a
local key-value store with no server involved.

Writes go to a temporary file first and are moved into place with
os.replace, so a crash mid-write leaves the previous value intact.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from investment_manager.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


_VALID_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """Key-value storage backed by one file per key."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        """Read the file for a key; None if it was never written."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    async def set(self, key: str, value: str) -> bool:
        """Atomically replace the file for a key."""
        path = self._path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            return True
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")
