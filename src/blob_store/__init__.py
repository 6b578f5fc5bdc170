"""Keyed blob storage engine."""

from blob_store.errors import (
    BlobNotFoundError,
    BlobStoreError,
    BlobTooLargeError,
    CorruptBlobError,
    InvalidFilenameError,
    StorageUnavailableError,
    UnsupportedCompressionError,
)
from blob_store.service import BlobService

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BlobNotFoundError",
    "BlobService",
    "BlobStoreError",
    "BlobTooLargeError",
    "CorruptBlobError",
    "InvalidFilenameError",
    "StorageUnavailableError",
    "UnsupportedCompressionError",
]
