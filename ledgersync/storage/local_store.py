"""
Key-value store implementations for the local cache.

KeyValueStore is the contract the domain services and the reset service
consume. Two implementations ship: an in-memory dict for tests and
ephemeral sessions, and a single JSON file for a persistent cache.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Union

from ledgersync.errors import PersistentStoreError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...

    async def remove_many(self, keys: Iterable[str]) -> None:
        ...

    async def list_all_keys(self) -> List[str]:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def list_all_keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileKeyValueStore:
    """
    Store every key in one JSON object on disk.

    The file is read lazily on first access and rewritten atomically
    (write to a temp file, then rename) after each mutation.

    Raises:
        PersistentStoreError: On any read, decode or write failure
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise PersistentStoreError(f"Cannot read local store {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise PersistentStoreError(f"Local store {self.path} is not a JSON object")

        self._data = {str(k): str(v) for k, v in raw.items()}
        logger.debug(f"Loaded {len(self._data)} keys from {self.path}")
        return self._data

    def _flush(self, data: Dict[str, str]) -> None:
        # The in-memory view changes only once the file is replaced
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistentStoreError(f"Cannot write local store {self.path}: {e}") from e
        self._data = data

    async def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data)

    async def remove(self, key: str) -> None:
        if key in self._load():
            data = dict(self._load())
            del data[key]
            self._flush(data)

    async def remove_many(self, keys: Iterable[str]) -> None:
        data = dict(self._load())
        removed = 0
        for key in keys:
            if data.pop(key, None) is not None:
                removed += 1
        if removed:
            self._flush(data)

    async def list_all_keys(self) -> List[str]:
        return list(self._load().keys())
