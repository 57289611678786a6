"""Persistent key-value storage for the snapshot store.

The snapshot store only needs ``get(key, fallback)`` and ``set(key, value)``
over JSON-compatible values. :class:`JsonFileKeyValueStore` keeps all keys
in one JSON file and replaces it atomically on every write.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from mindmark.errors import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable, non-transactional key-value storage."""

    def get(self, key: str, fallback: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> bool: ...


class MemoryKeyValueStore:
    """In-process store; nothing survives the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, fallback: Any = None) -> Any:
        return json.loads(json.dumps(self._data[key])) if key in self._data else fallback

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = json.loads(json.dumps(value))
        return True


def _atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileKeyValueStore:
    """All keys in a single JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot read store {self._path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt store file at %s, starting fresh", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Unexpected store layout at %s, starting fresh", self._path)
            return {}
        return data

    def get(self, key: str, fallback: Any = None) -> Any:
        return self._read().get(key, fallback)

    def set(self, key: str, value: Any) -> bool:
        try:
            data = self._read()
            data[key] = value
            _atomic_write(self._path, json.dumps(data, indent=2, default=str))
        except (OSError, TypeError, ValueError, StoreError) as exc:
            logger.error("Failed to write %s to %s: %s", key, self._path, exc)
            return False
        return True
