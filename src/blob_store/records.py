"""In-memory blob representations.

BlobRecord and BlobRecordMetadata are the typed form of a stored row, used
between the codec, repository and service. BlobContent and BlobMetadata are
what the service hands to its callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from blob_store.models.enums import CompressionStrategy


@dataclass(frozen=True)
class BlobRecordMetadata:
    """Every stored field except the body."""

    id: UUID
    filename: str
    mime_type: str
    size_after_compress: int
    size_before_compress: int
    hash_before_compress: str
    compression_strategy: CompressionStrategy
    created_at: datetime


@dataclass(frozen=True)
class BlobRecord(BlobRecordMetadata):
    """A full stored blob. ``body`` holds the bytes as stored (post-compression)."""

    body: bytes

    @property
    def metadata(self) -> BlobRecordMetadata:
        return BlobRecordMetadata(
            id=self.id,
            filename=self.filename,
            mime_type=self.mime_type,
            size_after_compress=self.size_after_compress,
            size_before_compress=self.size_before_compress,
            hash_before_compress=self.hash_before_compress,
            compression_strategy=self.compression_strategy,
            created_at=self.created_at,
        )


class BlobMetadata(BaseModel):
    """Descriptive fields of a blob, returned without the body."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    filename: str
    mime_type: str
    size: int
    created_at: datetime
    digest: str

    @classmethod
    def from_record(cls, record: BlobRecordMetadata) -> BlobMetadata:
        return cls(
            id=record.id,
            filename=record.filename,
            mime_type=record.mime_type,
            size=record.size_before_compress,
            created_at=record.created_at,
            digest=record.hash_before_compress,
        )


class BlobContent(BlobMetadata):
    """A blob's logical (decompressed) body plus its descriptive fields."""

    body: bytes

    @classmethod
    def from_record(cls, record: BlobRecord, body: bytes) -> BlobContent:  # type: ignore[override]
        return cls(
            id=record.id,
            filename=record.filename,
            mime_type=record.mime_type,
            size=record.size_before_compress,
            created_at=record.created_at,
            digest=record.hash_before_compress,
            body=body,
        )
