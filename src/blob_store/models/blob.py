"""Persisted row layout for stored blobs."""

from __future__ import annotations

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blob_store.models.base import Base


class StoredBlob(Base):
    """One blob row, addressed by the composite key (id, filename).

    Every column holds the plain text/integer form written by the codec:
    the UUID as its canonical string, the body as hex, the compression
    strategy by value and created_at as epoch milliseconds. Typed decoding
    happens in blob_store.codec, never here.
    """

    __tablename__ = "storage"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    filename: Mapped[str] = mapped_column(String(1024), primary_key=True)
    mime_type: Mapped[str] = mapped_column(String(255))
    body: Mapped[str] = mapped_column(Text)
    size_after_compress: Mapped[int] = mapped_column(BigInteger)
    size_before_compress: Mapped[int] = mapped_column(BigInteger)
    hash_before_compress: Mapped[str] = mapped_column(String(128))
    compression_strategy: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[int] = mapped_column(BigInteger)


# Columns read by metadata-only lookups (no body)
METADATA_COLUMNS = (
    StoredBlob.id,
    StoredBlob.filename,
    StoredBlob.mime_type,
    StoredBlob.size_after_compress,
    StoredBlob.size_before_compress,
    StoredBlob.hash_before_compress,
    StoredBlob.compression_strategy,
    StoredBlob.created_at,
)

FULL_COLUMNS = (*METADATA_COLUMNS, StoredBlob.body)
