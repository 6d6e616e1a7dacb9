"""Storage layer — key-value backends and the JSON adapter over them."""

from qulome.storage.adapter import SaveResult, StorageAdapter
from qulome.storage.backends import (
    STORE_FILENAME,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)

__all__ = [
    "STORE_FILENAME",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SaveResult",
    "StorageAdapter",
]
