"""Database models for the blob store."""

from blob_store.models.base import Base
from blob_store.models.blob import FULL_COLUMNS, METADATA_COLUMNS, StoredBlob
from blob_store.models.enums import CompressionStrategy

__all__ = [
    "Base",
    "CompressionStrategy",
    "FULL_COLUMNS",
    "METADATA_COLUMNS",
    "StoredBlob",
]
