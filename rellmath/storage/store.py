from __future__ import annotations

"""Key-value persistence: the adapter interface and two stores.

Values are strings at this boundary; encoding and decoding belong to the
caller. `JsonFileStore` keeps every key in one JSON object file, rewritten on
each save or remove.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..errors import PersistenceUnavailable


class PersistenceAdapter(Protocol):
    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store. Used by tests and by `storage.backend: memory`."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = str(value)

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PersistenceUnavailable(f"cannot write {self.path}: {e}") from e

    def load(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def save(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key not in data:
            return
        del data[key]
        self._write(data)


def make_store(storage_cfg: Dict) -> PersistenceAdapter:
    """Build the store named by a validated `storage` config section."""
    if storage_cfg.get("backend") == "memory":
        return MemoryStore()
    return JsonFileStore(storage_cfg.get("path", "./rellmath_store.json"))
