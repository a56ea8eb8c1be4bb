"""Build file descriptors for files offered to a receiver.

This module provides:
- get_mime_type: Static extension to MIME type lookup
- describe: FileDescriptor for one local file
- describe_all: FileDescriptors for a list of files, before any network call
"""

from __future__ import annotations

import logging
import stat
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from lansend.client.types import FileDescriptor, LocalIOError
from lansend.core.hashing import compute_file_hash

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_mime_type(path: Path) -> str:
    """Get the MIME type of a file from its extension (case-insensitive)."""
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def _isoformat(timestamp: float) -> str:
    """Format a POSIX timestamp as UTC ISO-8601."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def describe(path: Path | str) -> FileDescriptor:
    """Build the descriptor of a local file.

    Args:
        path: Path to a regular file.

    Returns:
        FileDescriptor with a fresh id.

    Raises:
        LocalIOError: If the path is missing, not a regular file, or unreadable.
    """
    path = Path(path)
    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise LocalIOError(f"File not found: {path}") from e
    except OSError as e:
        raise LocalIOError(f"Cannot access {path}: {e}") from e

    if not stat.S_ISREG(st.st_mode):
        raise LocalIOError(f"Not a regular file: {path}")

    try:
        sha256 = compute_file_hash(path)
    except OSError as e:
        raise LocalIOError(f"Cannot read {path}: {e}") from e

    return FileDescriptor(
        id=str(uuid.uuid4()),
        file_name=path.name,
        size=st.st_size,
        file_type=get_mime_type(path),
        sha256=sha256,
        path=path,
        modified=_isoformat(st.st_mtime),
        accessed=_isoformat(st.st_atime),
    )


def describe_all(paths: Iterable[Path | str]) -> list[FileDescriptor]:
    """Build descriptors for every path, in order.

    Fails on the first unreadable path.

    Raises:
        LocalIOError: If any path cannot be described.
    """
    files = [describe(p) for p in paths]
    logger.debug(f"Cataloged {len(files)} file(s), {sum(f.size for f in files)} bytes")
    return files
