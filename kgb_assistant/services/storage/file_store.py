"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object on disk plays the role the browser's
localStorage played in the original tool:
1. No database setup required
2. The file can be opened, backed up or mailed around by HR staff
3. The whole collection lives under one key, just like before

TRADEOFFS:
- Every write rewrites the whole file (fine for a few thousand employees)
- No concurrent writers (there is exactly one user per file)

Writes go to a temporary file that then replaces the original, so a crash
mid-write leaves the previous version intact. Transient OS errors (a file
briefly locked by a sync client or a virus scanner) are retried.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kgb_assistant.services.storage.interface import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """
    Key-value store persisted as one JSON object file.

    Values are stored as strings, exactly as handed in.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole file. A missing file is an empty store."""
        if not self._path.exists():
            return {}

        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Cannot read {self._path}: {e}")

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Storage file {self._path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise StorageReadError(
                f"Storage file {self._path} must hold a JSON object, "
                f"found {type(data).__name__}"
            )
        return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_all(self, data: dict[str, str]) -> None:
        """Atomically replace the file contents."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    def _current_or_empty(self) -> dict[str, str]:
        try:
            return self._read_all()
        except StorageReadError as e:
            # Unreadable content is replaced rather than blocking every save
            logger.warning("storage_file_reset", path=str(self._path), error=str(e))
            return {}

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            # Hand-edited files may hold the array itself instead of a string
            return json.dumps(value)
        return value

    def set(self, key: str, value: str) -> None:
        data = self._current_or_empty()
        data[key] = value
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self._path}: {e}")

    def delete(self, key: str) -> bool:
        data = self._current_or_empty()
        if key not in data:
            return False
        del data[key]
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self._path}: {e}")
        return True
