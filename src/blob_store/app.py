"""FastAPI application exposing the blob service over HTTP.

Routes (prefix /api/file):
    GET    /{id}/{filename}            - body inline, Content-Type from stored mime
    GET    /{id}/meta/{filename}       - metadata as JSON
    GET    /{id}/download/{filename}   - body as an attachment
    DELETE /{id}/{filename}            - delete (idempotent)
    POST   /{id}/{filename}            - upload the raw request body
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from blob_store import __version__
from blob_store.db import create_engine, init_db
from blob_store.errors import (
    BlobNotFoundError,
    BlobTooLargeError,
    InvalidFilenameError,
    UnsupportedCompressionError,
)
from blob_store.records import BlobMetadata
from blob_store.service import BlobService

router = APIRouter(prefix="/api/file", tags=["files"])


def get_blob_service(request: Request) -> BlobService:
    """Dependency returning the service bound to the application's engine."""
    return request.app.state.blob_service


BlobServiceDep = Annotated[BlobService, Depends(get_blob_service)]


def content_disposition(filename: str) -> str:
    """Attachment header value, RFC 5987 encoded when the name is not plain ASCII."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.get("/{blob_id}/meta/{filename}", response_model=BlobMetadata)
async def get_metadata(blob_id: UUID, filename: str, service: BlobServiceDep) -> BlobMetadata:
    """Metadata only; the body is never loaded."""
    return await service.read_metadata(blob_id, filename)


@router.get("/{blob_id}/download/{filename}")
async def download_blob(blob_id: UUID, filename: str, service: BlobServiceDep) -> Response:
    blob = await service.read(blob_id, filename)
    return Response(
        content=blob.body,
        headers={
            "Content-Type": blob.mime_type,
            "Content-Disposition": content_disposition(blob.filename),
            "ETag": f'"{blob.digest}"',
        },
    )


@router.get("/{blob_id}/{filename}")
async def view_blob(blob_id: UUID, filename: str, service: BlobServiceDep) -> Response:
    blob = await service.read(blob_id, filename)
    # Stored mime type sent verbatim, without a charset parameter
    return Response(
        content=blob.body,
        headers={"Content-Type": blob.mime_type, "ETag": f'"{blob.digest}"'},
    )


@router.post("/{blob_id}/{filename}", status_code=status.HTTP_201_CREATED)
async def upload_blob(
    blob_id: UUID, filename: str, request: Request, service: BlobServiceDep
) -> Response:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit():
        service.check_upload_size(int(declared))
    body = await request.body()
    await service.upload(blob_id, filename, body)
    return Response(status_code=status.HTTP_201_CREATED)


@router.delete("/{blob_id}/{filename}")
async def delete_blob(blob_id: UUID, filename: str, service: BlobServiceDep) -> Response:
    await service.delete(blob_id, filename)
    return Response(status_code=status.HTTP_200_OK)


async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, BlobNotFoundError)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=exc.to_dict())


def _error_handler(status_code: int):
    async def _handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"err": str(exc)})

    return _handler


def create_app(engine: AsyncEngine | None = None) -> FastAPI:
    """Build the application.

    With no ``engine`` one is created from settings at startup, the schema
    is initialised, and the engine is disposed at shutdown. A supplied
    engine is used as-is and left open.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler."""
        if engine is not None:
            yield
            return
        owned_engine = create_engine()
        await init_db(owned_engine)
        app.state.blob_service = BlobService(owned_engine)
        try:
            yield
        finally:
            await owned_engine.dispose()

    application = FastAPI(
        title="Blob Store",
        description="Keyed blob storage with content digests and metadata-only reads",
        version=__version__,
        lifespan=lifespan,
    )
    if engine is not None:
        application.state.blob_service = BlobService(engine)

    application.include_router(router)
    application.add_exception_handler(BlobNotFoundError, _not_found_handler)
    application.add_exception_handler(BlobTooLargeError, _error_handler(413))
    application.add_exception_handler(UnsupportedCompressionError, _error_handler(422))
    application.add_exception_handler(InvalidFilenameError, _error_handler(400))

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    return application


app = create_app()
