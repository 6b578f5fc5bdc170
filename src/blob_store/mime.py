"""Mime type inference from filenames.

Resolution is extension based only; the payload is never inspected. The
lookup uses a private copy of the interpreter's built-in table so results
do not depend on the host's /etc/mime.types.
"""

from __future__ import annotations

import mimetypes
import re
from pathlib import PurePosixPath
from typing import Final

DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"

# Extensions missing from (or inconsistent across) interpreter versions
_OVERRIDES: Final[dict[str, str]] = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".log": "text/plain",
    ".jsonl": "application/jsonl",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".toml": "application/toml",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

# Content-encoding suffixes: the stored bytes are the compressed container
_ENCODING_TYPES: Final[dict[str, str]] = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
    "compress": "application/x-compress",
}

_MIME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[A-Za-z0-9][A-Za-z0-9!#$&^_.+-]*/[A-Za-z0-9][A-Za-z0-9!#$&^_.+-]*(\s*;.*)?$"
)

_table = mimetypes.MimeTypes()


def guess_mime_type(path: str) -> str:
    """Best-guess mime type for a path or filename.

    Never fails: unknown or missing extensions give ``application/octet-stream``.

    Examples:
        "test.txt" -> "text/plain"
        "/tmp/report.pdf" -> "application/pdf"
        "backup.tar.gz" -> "application/gzip"
        "README" -> "application/octet-stream"
    """
    name = PurePosixPath(path).name
    if not name:
        return DEFAULT_MIME_TYPE

    suffix = PurePosixPath(name).suffix.lower()
    if suffix in _OVERRIDES:
        return _OVERRIDES[suffix]

    mime_type, encoding = _table.guess_type(name, strict=True)
    if encoding is not None:
        return _ENCODING_TYPES.get(encoding, DEFAULT_MIME_TYPE)
    return mime_type or DEFAULT_MIME_TYPE


def is_valid_mime_type(value: str) -> bool:
    """Check that ``value`` is a syntactically valid ``type/subtype``."""
    return bool(_MIME_PATTERN.match(value))
