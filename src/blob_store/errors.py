"""Error types for blob storage operations.

BlobNotFoundError is the only outcome callers are expected to handle.
Everything else means the store is unreachable or holds data this engine
would never have written, and should abort the current operation.
"""

from __future__ import annotations

from uuid import UUID


class BlobStoreError(Exception):
    """Base exception for all blob store errors."""


class BlobNotFoundError(BlobStoreError):
    """Raised when no blob exists under the (id, filename) key."""

    def __init__(self, blob_id: UUID, filename: str) -> None:
        self.id = blob_id
        self.filename = filename
        super().__init__(f"Blob '{blob_id}/{filename}' not found")

    def to_dict(self) -> dict[str, str]:
        return {"id": str(self.id), "filename": self.filename, "err": str(self)}


class CorruptBlobError(BlobStoreError):
    """Raised when a stored row cannot be decoded or fails verification."""

    def __init__(self, blob_id: object, filename: str, field: str, reason: str) -> None:
        self.id = blob_id
        self.filename = filename
        self.field = field
        self.reason = reason
        super().__init__(f"Corrupt blob '{blob_id}/{filename}': field {field!r}: {reason}")


class StorageUnavailableError(BlobStoreError):
    """Raised when a connection cannot be acquired or the backend fails."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        msg = f"Storage unavailable during {operation}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class UnsupportedCompressionError(BlobStoreError):
    """Raised for a compression strategy that has no implementation."""

    def __init__(self, strategy: str) -> None:
        self.strategy = strategy
        super().__init__(f"Compression strategy {strategy!r} is not supported")


class InvalidFilenameError(BlobStoreError, ValueError):
    """Raised when an upload path has no usable basename."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Cannot derive a filename from path {path!r}")


class BlobTooLargeError(BlobStoreError, ValueError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Blob of {size} bytes exceeds the {limit} byte upload limit")
