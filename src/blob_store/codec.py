"""Conversion between BlobRecord and its persisted row form.

Encoding produces only strings and integers: the UUID in canonical form,
the body as lowercase hex, the compression strategy by value and
created_at as integer epoch milliseconds (UTC).

Decoding is strict. Any value this module would not itself have written
raises CorruptBlobError naming the offending column; nothing is defaulted.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, Final
from uuid import UUID

from blob_store.errors import CorruptBlobError
from blob_store.hashing import is_valid_digest
from blob_store.mime import is_valid_mime_type
from blob_store.models.enums import CompressionStrategy
from blob_store.records import BlobRecord, BlobRecordMetadata

_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECOND: Final[timedelta] = timedelta(milliseconds=1)


def to_epoch_millis(value: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    if value.tzinfo is None:
        raise ValueError("created_at must be timezone-aware")
    return (value - _EPOCH) // _MILLISECOND


def from_epoch_millis(value: int) -> datetime:
    return _EPOCH + value * _MILLISECOND


def encode_record(record: BlobRecord) -> dict[str, Any]:
    """Build the column values for inserting ``record``."""
    return {
        "id": str(record.id),
        "filename": record.filename,
        "mime_type": record.mime_type,
        "body": record.body.hex(),
        "size_after_compress": record.size_after_compress,
        "size_before_compress": record.size_before_compress,
        "hash_before_compress": record.hash_before_compress,
        "compression_strategy": record.compression_strategy.value,
        "created_at": to_epoch_millis(record.created_at),
    }


def decode_metadata(row: Mapping[str, Any]) -> BlobRecordMetadata:
    """Decode every column except ``body``."""
    return BlobRecordMetadata(**_decode_common(row))


def decode_record(row: Mapping[str, Any]) -> BlobRecord:
    """Decode a full row including the hex body."""
    fields = _decode_common(row)
    fields["body"] = _decode_body(row, fields["filename"])
    return BlobRecord(**fields)


def _decode_common(row: Mapping[str, Any]) -> dict[str, Any]:
    raw_id = row["id"]
    filename = row["filename"]
    if not isinstance(filename, str) or not filename:
        raise CorruptBlobError(raw_id, str(filename), "filename", "empty or not text")

    def corrupt(field: str, reason: str) -> CorruptBlobError:
        return CorruptBlobError(raw_id, filename, field, reason)

    try:
        blob_id = UUID(str(raw_id))
    except ValueError as e:
        raise corrupt("id", f"not a UUID: {raw_id!r}") from e

    mime_type = row["mime_type"]
    if not isinstance(mime_type, str) or not is_valid_mime_type(mime_type):
        raise corrupt("mime_type", f"not a mime type: {mime_type!r}")

    size_after = _non_negative_int(row["size_after_compress"])
    if size_after is None:
        raise corrupt("size_after_compress", f"invalid size: {row['size_after_compress']!r}")
    size_before = _non_negative_int(row["size_before_compress"])
    if size_before is None:
        raise corrupt("size_before_compress", f"invalid size: {row['size_before_compress']!r}")

    digest = row["hash_before_compress"]
    if not isinstance(digest, str) or not is_valid_digest(digest):
        raise corrupt("hash_before_compress", "not a hex digest")

    raw_strategy = row["compression_strategy"]
    try:
        strategy = CompressionStrategy(raw_strategy)
    except ValueError as e:
        raise corrupt("compression_strategy", f"unknown strategy: {raw_strategy!r}") from e

    raw_created = row["created_at"]
    if not isinstance(raw_created, int) or isinstance(raw_created, bool):
        raise corrupt("created_at", f"not an integer timestamp: {raw_created!r}")
    try:
        created_at = from_epoch_millis(raw_created)
    except OverflowError as e:
        raise corrupt("created_at", f"timestamp out of range: {raw_created}") from e

    return {
        "id": blob_id,
        "filename": filename,
        "mime_type": mime_type,
        "size_after_compress": size_after,
        "size_before_compress": size_before,
        "hash_before_compress": digest,
        "compression_strategy": strategy,
        "created_at": created_at,
    }


def _decode_body(row: Mapping[str, Any], filename: str) -> bytes:
    raw_body = row["body"]
    if not isinstance(raw_body, str):
        raise CorruptBlobError(row["id"], filename, "body", "not hex text")
    try:
        body = bytes.fromhex(raw_body)
    except ValueError as e:
        raise CorruptBlobError(row["id"], filename, "body", "malformed hex") from e
    if len(body) != row["size_after_compress"]:
        raise CorruptBlobError(
            row["id"],
            filename,
            "body",
            f"length {len(body)} does not match size_after_compress {row['size_after_compress']}",
        )
    return body


def _non_negative_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value
