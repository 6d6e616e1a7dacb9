"""Exception types shared across the qulome services.

Storage faults are absorbed by the storage adapter and never reach
callers. Validation and lookup failures are raised so the UI can turn
them into user-facing messages. Corrupted records are not exceptions at
all: the healer drops or repairs them and logs what it did.
"""

from __future__ import annotations


class QulomeError(Exception):
    """Base class for all qulome errors."""


class StorageError(QulomeError):
    """Serialization or backend failure inside the storage layer."""


class StorageQuotaError(StorageError):
    """The key-value backend refused a write because it is full."""


class ValidationError(QulomeError):
    """Caller-supplied data violates a model invariant."""


class NotFoundError(QulomeError):
    """A lookup by id failed for an operation that must not fall back."""

    def __init__(self, kind: str, entity_id: str | None) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id!r} not found")
