"""Key-value backends behind the storage adapter.

Both backends hold string values only, like browser localStorage. The
file backend keeps the whole key space in one JSON file, loaded on init
and saved after every write.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from qulome.errors import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)

STORE_FILENAME = ".qulome-store.json"


class KeyValueStore(Protocol):
    """Minimal string key-value interface the adapter depends on."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


def _size_with(items: dict[str, str], key: str, value: str) -> int:
    total = len(key) + len(value)
    for k, v in items.items():
        if k != key:
            total += len(k) + len(v)
    return total


class MemoryStore:
    """Dict-backed store, used for tests and throwaway sessions."""

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self._items: dict[str, str] = dict(initial or {})
        self._max_bytes = max_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._max_bytes is not None and _size_with(self._items, key, value) > self._max_bytes:
            raise StorageQuotaError(f"Quota of {self._max_bytes} bytes exceeded writing {key!r}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStore:
    """Single-file JSON store rooted in a data directory."""

    def __init__(self, data_dir: Path, max_bytes: int | None = None) -> None:
        self._path = data_dir / STORE_FILENAME
        self._max_bytes = max_bytes
        self._items = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            logger.warning("Corrupt store file at %s, starting fresh", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Store file at %s is not an object, starting fresh", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._items, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StorageError(f"Could not write {self._path}: {exc}") from exc

    # ── KeyValueStore ────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._max_bytes is not None and _size_with(self._items, key, value) > self._max_bytes:
            raise StorageQuotaError(f"Quota of {self._max_bytes} bytes exceeded writing {key!r}")
        self._items[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if key in self._items:
            del self._items[key]
            self._save()

    def keys(self) -> list[str]:
        return list(self._items)
