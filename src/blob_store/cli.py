"""CLI for the blob store.

Commands:
    init-db                      - Create the storage table
    upload <id> <path>           - Upload a local file
    cat <id> <filename>          - Write a blob's body to stdout or a file
    meta <id> <filename>         - Show a blob's metadata
    delete <id> <filename>       - Delete a blob
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, NoReturn, TypeVar
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from blob_store.config import settings
from blob_store.db import create_engine, init_db
from blob_store.errors import BlobNotFoundError, BlobStoreError
from blob_store.log_config import setup_logging
from blob_store.service import BlobService

app = typer.Typer(
    name="blob-store",
    help="Blob store: keyed blob storage with digests and metadata",
    no_args_is_help=True,
)
console = Console()

T = TypeVar("T")


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


async def _with_service(func: Callable[[BlobService], Awaitable[T]]) -> T:
    """Run ``func`` against a service on a fresh engine, disposing it afterwards."""
    engine = create_engine()
    try:
        await init_db(engine)
        return await func(BlobService(engine))
    finally:
        await engine.dispose()


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    """Blob store command line."""
    setup_logging("DEBUG" if verbose else settings.log_level)


@app.command("init-db")
def init_db_command():
    """Create the storage table if it does not exist."""

    async def _init():
        engine = create_engine()
        try:
            await init_db(engine)
        finally:
            await engine.dispose()

    run_async(_init())
    console.print("[green]Database initialised[/green]")


@app.command()
def upload(
    blob_id: Annotated[UUID, typer.Argument(help="Blob group ID")],
    path: Annotated[Path, typer.Argument(help="Local file to upload")],
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Filename to store under")
    ] = None,
):
    """Upload a file. An existing blob with the same ID and filename is replaced."""
    if not path.is_file():
        _fail(f"Path is not a file: {path}")

    body = path.read_bytes()
    target = name or path.name

    try:
        run_async(_with_service(lambda service: service.upload(blob_id, target, body)))
    except BlobStoreError as e:
        _fail(str(e))

    console.print(f"[green]OK[/green] {blob_id}/{Path(target).name} ({len(body):,} bytes)")


@app.command()
def cat(
    blob_id: Annotated[UUID, typer.Argument(help="Blob group ID")],
    filename: Annotated[str, typer.Argument(help="Stored filename")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to this file instead of stdout")
    ] = None,
):
    """Print a blob's body."""
    try:
        content = run_async(_with_service(lambda service: service.read(blob_id, filename)))
    except BlobNotFoundError as e:
        _fail(str(e))

    if output is not None:
        output.write_bytes(content.body)
        console.print(f"[green]Wrote[/green] {len(content.body):,} bytes to {output}")
        return

    stdout = typer.get_binary_stream("stdout")
    stdout.write(content.body)
    stdout.flush()


@app.command()
def meta(
    blob_id: Annotated[UUID, typer.Argument(help="Blob group ID")],
    filename: Annotated[str, typer.Argument(help="Stored filename")],
):
    """Show a blob's metadata without loading its body."""
    try:
        metadata = run_async(
            _with_service(lambda service: service.read_metadata(blob_id, filename))
        )
    except BlobNotFoundError as e:
        _fail(str(e))

    table = Table(title=f"{metadata.id}/{metadata.filename}")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Mime type", metadata.mime_type)
    table.add_row("Size", f"{metadata.size:,} bytes")
    table.add_row("Created", metadata.created_at.isoformat())
    table.add_row("Digest", metadata.digest)
    console.print(table)


@app.command()
def delete(
    blob_id: Annotated[UUID, typer.Argument(help="Blob group ID")],
    filename: Annotated[str, typer.Argument(help="Stored filename")],
):
    """Delete a blob. Deleting a missing blob succeeds."""
    run_async(_with_service(lambda service: service.delete(blob_id, filename)))
    console.print(f"[green]Deleted[/green] {blob_id}/{filename}")


if __name__ == "__main__":
    app()
