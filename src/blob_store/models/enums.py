"""Enumerations for the blob store data model."""

from enum import Enum


class CompressionStrategy(str, Enum):
    """Transform applied to a body before it is stored.

    Persisted by value. Only UNCOMPRESSED has an implemented code path.
    """

    UNCOMPRESSED = "uncompressed"
    LZ4 = "lz4"
