"""Shared pytest fixtures for blob store tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from blob_store.hashing import compute_digest
from blob_store.models import Base, CompressionStrategy
from blob_store.records import BlobRecord
from blob_store.service import BlobService


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Engine on a fresh SQLite file with the schema created.

    Each test gets its own database file, so no cleanup between tests is needed.
    """
    engine = create_async_engine(sqlite_url(tmp_path / "blobs.db"), echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def service(test_engine: AsyncEngine) -> BlobService:
    return BlobService(test_engine, verify_on_read=True, max_upload_bytes=None)


MakeRecord = Callable[..., BlobRecord]


@pytest.fixture
def make_record() -> MakeRecord:
    """Factory fixture for creating BlobRecord instances."""

    def _make(
        *,
        blob_id: UUID | None = None,
        filename: str = "test01.txt",
        body: bytes = b"TEST",
        mime_type: str = "text/plain",
        created_at: datetime | None = None,
    ) -> BlobRecord:
        return BlobRecord(
            id=blob_id or uuid4(),
            filename=filename,
            mime_type=mime_type,
            size_after_compress=len(body),
            size_before_compress=len(body),
            hash_before_compress=compute_digest(body),
            compression_strategy=CompressionStrategy.UNCOMPRESSED,
            created_at=created_at or datetime(2024, 5, 6, 12, 30, 15, 123000, tzinfo=UTC),
            body=body,
        )

    return _make
