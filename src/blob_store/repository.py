"""Keyed persistence operations for blob rows.

Every function takes the shared AsyncEngine and holds exactly one pooled
connection, inside one transaction, for the duration of the call. All
lookups filter on both halves of the (id, filename) key.

Failures to reach the backend surface as StorageUnavailableError; a missing
row on lookup is BlobNotFoundError; rows that do not decode are
CorruptBlobError. Nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final
from uuid import UUID

from sqlalchemy import ColumnElement, and_
from sqlalchemy import delete as sql_delete
from sqlalchemy import insert as sql_insert
from sqlalchemy import select as sql_select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from blob_store.codec import decode_metadata, decode_record, encode_record
from blob_store.errors import BlobNotFoundError, StorageUnavailableError
from blob_store.models.blob import FULL_COLUMNS, METADATA_COLUMNS, StoredBlob
from blob_store.records import BlobRecord, BlobRecordMetadata

logger = logging.getLogger(__name__)

_KEY_COLUMNS: Final[tuple[str, str]] = ("id", "filename")

_UNAVAILABLE: Final[tuple[type[Exception], ...]] = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    OSError,
)


@asynccontextmanager
async def _begin(engine: AsyncEngine, operation: str) -> AsyncIterator[AsyncConnection]:
    """Check out a connection and open a transaction around one operation."""
    try:
        async with engine.begin() as conn:
            yield conn
    except _UNAVAILABLE as e:
        raise StorageUnavailableError(operation, e) from e


def _key(blob_id: UUID, filename: str) -> ColumnElement[bool]:
    return and_(StoredBlob.id == str(blob_id), StoredBlob.filename == filename)


def _upsert_statement(dialect_name: str, values: dict[str, Any]) -> Any | None:
    """INSERT ... ON CONFLICT (id, filename) DO UPDATE, where the dialect has it."""
    if dialect_name == "sqlite":
        stmt = sqlite_insert(StoredBlob).values(**values)
    elif dialect_name == "postgresql":
        stmt = pg_insert(StoredBlob).values(**values)
    else:
        return None
    return stmt.on_conflict_do_update(
        index_elements=list(_KEY_COLUMNS),
        set_={name: stmt.excluded[name] for name in values if name not in _KEY_COLUMNS},
    )


async def insert(engine: AsyncEngine, record: BlobRecord) -> None:
    """Write ``record``, replacing any row stored under the same key."""
    values = encode_record(record)
    async with _begin(engine, "insert") as conn:
        stmt = _upsert_statement(conn.dialect.name, values)
        if stmt is not None:
            await conn.execute(stmt)
        else:
            # No ON CONFLICT support: replace within the one transaction
            await conn.execute(sql_delete(StoredBlob).where(_key(record.id, record.filename)))
            await conn.execute(sql_insert(StoredBlob).values(**values))
    logger.debug("Stored row %s/%s (%d hex chars)", record.id, record.filename, len(values["body"]))


async def select(engine: AsyncEngine, blob_id: UUID, filename: str) -> BlobRecord:
    """Fetch and decode the full row for (blob_id, filename).

    Raises:
        BlobNotFoundError: If no row matches the key.
        CorruptBlobError: If the stored row does not decode.
    """
    stmt = sql_select(*FULL_COLUMNS).where(_key(blob_id, filename))
    async with _begin(engine, "select") as conn:
        result = await conn.execute(stmt)
        row = result.one_or_none()
    if row is None:
        raise BlobNotFoundError(blob_id, filename)
    return decode_record(row._mapping)


async def select_metadata(engine: AsyncEngine, blob_id: UUID, filename: str) -> BlobRecordMetadata:
    """Fetch every column except the body for (blob_id, filename).

    The body column is neither read nor hex-decoded.

    Raises:
        BlobNotFoundError: If no row matches the key.
        CorruptBlobError: If the stored row does not decode.
    """
    stmt = sql_select(*METADATA_COLUMNS).where(_key(blob_id, filename))
    async with _begin(engine, "select_metadata") as conn:
        result = await conn.execute(stmt)
        row = result.one_or_none()
    if row is None:
        raise BlobNotFoundError(blob_id, filename)
    return decode_metadata(row._mapping)


async def delete(engine: AsyncEngine, blob_id: UUID, filename: str) -> bool:
    """Remove the row for (blob_id, filename) if present.

    Returns True if a row was deleted, False if there was nothing to delete.
    """
    async with _begin(engine, "delete") as conn:
        result = await conn.execute(sql_delete(StoredBlob).where(_key(blob_id, filename)))
        deleted = result.rowcount > 0
    return deleted
