"""Blob service: upload, read, metadata read and delete by (id, filename).

Usage:
    engine = create_engine()
    await init_db(engine)
    service = BlobService(engine)
    await service.upload(blob_id, "/tmp/report.pdf", data)
    content = await service.read(blob_id, "report.pdf")

The service keeps no mutable state of its own; concurrent calls only
share the engine's connection pool. Two uploads racing on the same key
resolve at the database and the last commit wins.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import PurePosixPath
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncEngine

from blob_store import repository
from blob_store.compression import compress, decompress, ensure_supported
from blob_store.config import settings
from blob_store.errors import (
    BlobNotFoundError,
    BlobTooLargeError,
    CorruptBlobError,
    InvalidFilenameError,
)
from blob_store.hashing import compute_digest, verify_digest
from blob_store.mime import guess_mime_type
from blob_store.models.enums import CompressionStrategy
from blob_store.records import BlobContent, BlobMetadata, BlobRecord

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for an option left to the configured settings."""


_UNSET = _Unset()


def normalize_filename(path: str) -> str:
    """Reduce an upload path or URL segment to its basename.

    Examples:
        "/tmp/report.pdf" -> "report.pdf"
        "report.pdf" -> "report.pdf"
        "/tmp/dir/" -> "dir"

    Raises:
        InvalidFilenameError: If the path has no basename ("", "/", "a/..").
    """
    name = PurePosixPath(path).name
    if not name or name in {".", ".."}:
        raise InvalidFilenameError(path)
    return name


class BlobService:
    """Stores and serves blobs addressed by (id, filename).

    ``verify_on_read`` and ``max_upload_bytes`` default to the configured
    settings when omitted. Passing ``max_upload_bytes=None`` explicitly
    disables the upload limit.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        verify_on_read: bool | None = None,
        max_upload_bytes: int | None | _Unset = _UNSET,
    ) -> None:
        self._engine = engine
        self._verify_on_read = settings.verify_on_read if verify_on_read is None else verify_on_read
        self._max_upload_bytes = (
            settings.max_upload_bytes if isinstance(max_upload_bytes, _Unset) else max_upload_bytes
        )

    def check_upload_size(self, size: int) -> None:
        """Raise BlobTooLargeError if ``size`` bytes exceeds the upload limit."""
        if self._max_upload_bytes is not None and size > self._max_upload_bytes:
            raise BlobTooLargeError(size, self._max_upload_bytes)

    async def upload(
        self,
        blob_id: UUID,
        path: str,
        body: bytes,
        *,
        compression: CompressionStrategy = CompressionStrategy.UNCOMPRESSED,
    ) -> None:
        """Store ``body`` under (blob_id, basename of ``path``).

        An existing blob under the same key is replaced entirely.

        Args:
            blob_id: External identifier grouping related blobs.
            path: Filename or path; only the basename is kept, the mime
                type is inferred from its extension.
            body: Raw payload.
            compression: Storage transform. Only UNCOMPRESSED is implemented.

        Raises:
            UnsupportedCompressionError: For any strategy without a code path.
            InvalidFilenameError: If ``path`` has no basename.
            BlobTooLargeError: If ``body`` exceeds the configured upload limit.
        """
        ensure_supported(compression)
        filename = normalize_filename(path)
        self.check_upload_size(len(body))

        digest = compute_digest(body)
        stored = compress(compression, body)
        record = BlobRecord(
            id=blob_id,
            filename=filename,
            mime_type=guess_mime_type(path),
            size_after_compress=len(stored),
            size_before_compress=len(body),
            hash_before_compress=digest,
            compression_strategy=compression,
            created_at=datetime.now(UTC),
            body=stored,
        )
        await repository.insert(self._engine, record)

        logger.info(
            "Uploaded blob %s/%s (%s, %d bytes, digest %s...)",
            blob_id,
            filename,
            record.mime_type,
            record.size_before_compress,
            digest[:16],
        )

    async def read(self, blob_id: UUID, filename: str) -> BlobContent:
        """Return the body and descriptive fields of a blob.

        Raises:
            BlobNotFoundError: If nothing is stored under the key.
            CorruptBlobError: If the stored row is inconsistent.
        """
        try:
            record = await repository.select(self._engine, blob_id, filename)
        except BlobNotFoundError:
            logger.debug("Blob %s/%s not found", blob_id, filename)
            raise

        body = decompress(record.compression_strategy, record.body)
        if len(body) != record.size_before_compress:
            raise CorruptBlobError(
                blob_id,
                filename,
                "size_before_compress",
                f"stored {record.size_before_compress}, body has {len(body)} bytes",
            )
        if self._verify_on_read and not verify_digest(body, record.hash_before_compress):
            raise CorruptBlobError(blob_id, filename, "hash_before_compress", "digest mismatch")

        logger.debug("Read blob %s/%s (%d bytes)", blob_id, filename, len(body))
        return BlobContent.from_record(record, body)

    async def read_metadata(self, blob_id: UUID, filename: str) -> BlobMetadata:
        """Return a blob's descriptive fields without loading its body.

        Raises:
            BlobNotFoundError: If nothing is stored under the key.
            CorruptBlobError: If the stored row is inconsistent.
        """
        try:
            record = await repository.select_metadata(self._engine, blob_id, filename)
        except BlobNotFoundError:
            logger.debug("Blob metadata %s/%s not found", blob_id, filename)
            raise
        return BlobMetadata.from_record(record)

    async def delete(self, blob_id: UUID, filename: str) -> None:
        """Remove a blob. Deleting a missing key is not an error."""
        deleted = await repository.delete(self._engine, blob_id, filename)
        if deleted:
            logger.info("Deleted blob %s/%s", blob_id, filename)
        else:
            logger.debug("Delete of missing blob %s/%s ignored", blob_id, filename)
