"""Database engine construction and schema bootstrap.

The AsyncEngine owns the connection pool. One engine is built per process
(or per CLI invocation) and shared by every BlobService that uses it.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from blob_store.config import Settings, settings
from blob_store.models import Base


def create_engine(config: Settings | None = None) -> AsyncEngine:
    """Build the pooled engine described by ``config`` (default: global settings)."""
    config = config or settings
    return create_async_engine(
        config.database_url,
        echo=config.database_echo,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create the storage table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
