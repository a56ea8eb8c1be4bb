"""SHA-256 digests of files offered to a receiver.

Files are read in fixed-size blocks so that a multi-gigabyte file costs
one block of memory. The digest is sent as the ``sha256`` field of the
prepare-upload request.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

HASH_BLOCK_SIZE = 64 * 1024  # 64 KiB


def hash_stream(stream: BinaryIO, block_size: int = HASH_BLOCK_SIZE) -> str:
    """Digest a binary stream from its current position to EOF."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    digest = hashlib.sha256()
    while chunk := stream.read(block_size):
        digest.update(chunk)
    return digest.hexdigest()


def compute_file_hash(path: Path, block_size: int = HASH_BLOCK_SIZE) -> str:
    """Get the lowercase hex SHA-256 of a file's content.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    with Path(path).open("rb") as stream:
        return hash_stream(stream, block_size)
