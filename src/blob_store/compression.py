"""Compression strategies applied to blob bodies before storage.

Only the identity transform is implemented. LZ4 is a recognised strategy
name but any attempt to use it fails loudly rather than storing
uncompressed bytes under the wrong label.
"""

from __future__ import annotations

from blob_store.errors import UnsupportedCompressionError
from blob_store.models.enums import CompressionStrategy

IMPLEMENTED_STRATEGIES: frozenset[CompressionStrategy] = frozenset(
    {CompressionStrategy.UNCOMPRESSED}
)


def ensure_supported(strategy: CompressionStrategy) -> None:
    """Raise UnsupportedCompressionError unless ``strategy`` has a code path."""
    if strategy not in IMPLEMENTED_STRATEGIES:
        raise UnsupportedCompressionError(strategy.value)


def compress(strategy: CompressionStrategy, data: bytes) -> bytes:
    ensure_supported(strategy)
    return data


def decompress(strategy: CompressionStrategy, data: bytes) -> bytes:
    ensure_supported(strategy)
    return data
