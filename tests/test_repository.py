"""Tests for keyed repository operations against SQLite."""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest
from conftest import MakeRecord
from sqlalchemy import select, text, update
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from blob_store import repository
from blob_store.errors import BlobNotFoundError, CorruptBlobError, StorageUnavailableError
from blob_store.models import StoredBlob

BLOB_ID = UUID("6ac3f044-000d-4e3f-af0c-98c0005c0695")
OTHER_ID = UUID("80d29c34-e174-48c5-b060-eaf878f66725")


async def _row_count(engine: AsyncEngine) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT COUNT(*) FROM storage"))
        return result.scalar_one()


class TestInsertAndSelect:
    async def test_select_returns_inserted_record(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        record = make_record(blob_id=BLOB_ID)
        await repository.insert(test_engine, record)

        assert await repository.select(test_engine, BLOB_ID, "test01.txt") == record

    async def test_body_is_stored_as_hex(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, body=b"TEST"))

        async with test_engine.connect() as conn:
            result = await conn.execute(select(StoredBlob.body, StoredBlob.id))
            body, stored_id = result.one()
        assert body == "54455354"
        assert stored_id == str(BLOB_ID)

    async def test_select_missing_raises_not_found(self, test_engine: AsyncEngine) -> None:
        with pytest.raises(BlobNotFoundError) as exc_info:
            await repository.select(test_engine, BLOB_ID, "test01.txt")
        assert exc_info.value.id == BLOB_ID
        assert exc_info.value.filename == "test01.txt"

    async def test_select_metadata(self, test_engine: AsyncEngine, make_record: MakeRecord) -> None:
        record = make_record(blob_id=BLOB_ID)
        await repository.insert(test_engine, record)

        assert await repository.select_metadata(test_engine, BLOB_ID, "test01.txt") == record.metadata

    async def test_select_metadata_missing_raises_not_found(self, test_engine: AsyncEngine) -> None:
        with pytest.raises(BlobNotFoundError):
            await repository.select_metadata(test_engine, BLOB_ID, "test01.txt")

    async def test_select_metadata_does_not_decode_body(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID))
        async with test_engine.begin() as conn:
            await conn.execute(update(StoredBlob).values(body="not hex at all"))

        metadata = await repository.select_metadata(test_engine, BLOB_ID, "test01.txt")
        assert metadata.size_before_compress == 4
        with pytest.raises(CorruptBlobError):
            await repository.select(test_engine, BLOB_ID, "test01.txt")


class TestCompositeKey:
    async def test_lookup_requires_both_key_parts(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, filename="a.txt"))

        with pytest.raises(BlobNotFoundError):
            await repository.select(test_engine, OTHER_ID, "a.txt")
        with pytest.raises(BlobNotFoundError):
            await repository.select(test_engine, BLOB_ID, "b.txt")

    async def test_same_id_many_filenames(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, filename="a.txt", body=b"A"))
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, filename="b.txt", body=b"B"))

        assert (await repository.select(test_engine, BLOB_ID, "a.txt")).body == b"A"
        assert (await repository.select(test_engine, BLOB_ID, "b.txt")).body == b"B"

    async def test_insert_same_key_replaces_row(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, body=b"first"))
        second = make_record(blob_id=BLOB_ID, body=b"second version")
        await repository.insert(test_engine, second)

        assert await repository.select(test_engine, BLOB_ID, "test01.txt") == second
        assert await _row_count(test_engine) == 1


class TestDelete:
    async def test_delete_existing(self, test_engine: AsyncEngine, make_record: MakeRecord) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID))
        assert await repository.select_metadata(test_engine, BLOB_ID, "test01.txt")

        assert await repository.delete(test_engine, BLOB_ID, "test01.txt") is True

        with pytest.raises(BlobNotFoundError):
            await repository.select_metadata(test_engine, BLOB_ID, "test01.txt")

    async def test_delete_missing_is_noop(self, test_engine: AsyncEngine) -> None:
        assert await repository.delete(test_engine, BLOB_ID, "test01.txt") is False

    async def test_delete_only_touches_its_key(
        self, test_engine: AsyncEngine, make_record: MakeRecord
    ) -> None:
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, filename="a.txt"))
        await repository.insert(test_engine, make_record(blob_id=BLOB_ID, filename="b.txt"))

        await repository.delete(test_engine, BLOB_ID, "a.txt")

        assert await repository.select_metadata(test_engine, BLOB_ID, "b.txt")
        assert await _row_count(test_engine) == 1


class TestUnavailableBackend:
    async def test_unreachable_database(self, tmp_path: Path) -> None:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}")
        try:
            with pytest.raises(StorageUnavailableError) as exc_info:
                await repository.select(engine, BLOB_ID, "test01.txt")
            assert exc_info.value.operation == "select"
        finally:
            await engine.dispose()
