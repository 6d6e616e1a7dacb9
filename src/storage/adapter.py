"""Typed JSON access to the key-value store.

This is the only code that talks to a backend. It never raises: decode
failures fall back to the caller's default, and write failures come back
as a ``SaveResult`` with ``success=False``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel

from qulome.errors import StorageError
from qulome.storage.backends import KeyValueStore

logger = logging.getLogger(__name__)


class SaveResult(BaseModel):
    """Outcome of a write."""

    success: bool
    error: str | None = None


class StorageAdapter:
    """JSON get/set over a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def load(self, key: str, default: Any = None) -> Any:
        """Return the decoded value at ``key``, or ``default``."""
        try:
            raw = self._store.get_item(key)
        except StorageError:
            logger.warning("Failed to read %s", key, exc_info=True)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Corrupt JSON under %s, using default", key)
            return default

    def save(self, key: str, value: Any) -> SaveResult:
        """Encode and write ``value`` under ``key``."""
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Could not serialize value for %s: %s", key, exc)
            return SaveResult(success=False, error=str(exc))
        return self._write(key, raw)

    def remove(self, key: str) -> None:
        try:
            self._store.remove_item(key)
        except StorageError:
            logger.warning("Failed to remove %s", key, exc_info=True)

    # ── Raw pointers ─────────────────────────────────────────────

    def load_text(self, key: str) -> str | None:
        """Return the raw string at ``key`` (pointers are not JSON-encoded)."""
        try:
            return self._store.get_item(key)
        except StorageError:
            logger.warning("Failed to read %s", key, exc_info=True)
            return None

    def save_text(self, key: str, value: str | None) -> SaveResult:
        """Write a raw string, or remove the key when ``value`` is None."""
        if value is None:
            self.remove(key)
            return SaveResult(success=True)
        return self._write(key, value)

    def _write(self, key: str, raw: str) -> SaveResult:
        try:
            self._store.set_item(key, raw)
        except StorageError as exc:
            logger.error("Failed to save %s: %s", key, exc)
            return SaveResult(success=False, error=str(exc))
        logger.debug("Saved %s (%d chars)", key, len(raw))
        return SaveResult(success=True)
