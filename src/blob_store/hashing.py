"""Content digests for uploaded payloads.

The digest is always taken over the logical (pre-compression) bytes so it
identifies content independently of how the body is stored.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Final

# BLAKE2b with the full 512-bit output
DIGEST_SIZE: Final[int] = 64
DIGEST_HEX_LENGTH: Final[int] = DIGEST_SIZE * 2


def compute_digest(data: bytes) -> str:
    """Return the BLAKE2b-512 digest of ``data`` as lowercase hex."""
    return hashlib.blake2b(data, digest_size=DIGEST_SIZE).hexdigest()


def verify_digest(data: bytes, expected: str) -> bool:
    """Check that ``data`` hashes to ``expected``."""
    return hmac.compare_digest(compute_digest(data), expected.lower())


def is_valid_digest(value: str) -> bool:
    if len(value) != DIGEST_HEX_LENGTH:
        return False
    try:
        bytes.fromhex(value)
    except ValueError:
        return False
    return value == value.lower()
